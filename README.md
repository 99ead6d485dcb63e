# kubebot

Building blocks for a chat assistant that runs `kubectl` commands against a
Kubernetes cluster and posts cluster events to chat channels. The package
decides what may be run, builds the commands and the interactive messages,
filters events and formats them; talking to the cluster and to chat services
is left to code you plug in.

## Modules

- `kubebot.kubectl.merger` – `Merger` merges the kubectl executors named by a
  list of bindings into one `EnabledKubectl` (allowed verbs, resources,
  per-resource `Namespaces`, default namespace, restrict-access flag).
  Verbs and resources are added up; the default namespace and
  restrict-access are overridden in binding order. `executors_from_mapping`
  builds the executor entries from a parsed configuration mapping with
  camelCase keys (`defaultNamespace`, `restrictAccess`). Namespace include
  and exclude entries are regular expressions matched against the whole name.
- `kubebot.kubectl.checker` – `Checker` tells whether a verb or a resource is
  allowed by an `EnabledKubectl`; an optional function supplies alternative
  names for a resource.
- `kubebot.kubectl.guard` – `CommandGuard` uses the server's resource list
  (a callable returning `APIResourceList` objects) to work out which verbs a
  resource supports and whether its name goes after a slash
  (`kubectl logs pods/<name>`). Errors are `VerbNotSupportedError`,
  `ResourceNotFoundError` and `DiscoveryError`, all subclasses of `GuardError`.
- `kubebot.kubectl.commander` – `Commander.get_commands_for_event` returns the
  `Command`s worth offering for an event, sorted by verb; delete events and
  the `delete` verb are left out.
- `kubebot.kubectl.normalizer` – `build_resource_normalizer` builds a
  `ResourceNormalizer` whose `normalize` maps a name such as `deploy` or
  `Deployment` to its variants.
- `kubebot.kubectl_executor` – `Kubectl` parses a chat command, applies the
  namespace, verb and resource rules, drops `--follow`, `--watch` and
  `--cluster-name` flags, and hands the final arguments to a runner you
  supply. Rejections raise `ExecutionCommandError` with a message for the user.
- `kubebot.cmd_builder` – `KubectlCmdBuilder` renders the dropdown messages
  for picking a verb, resource type, resource name and namespace, with a
  command preview and a Run button.
- `kubebot.interactive` – the message model (`Message`, `Section`, `Select`,
  `Button`, `LabelInput`, …) and the builder's message parts.
- `kubebot.events` – the `Event` model with `EventType` and `Level`.
- `kubebot.filters` and `kubebot.filterengine` – `NodeEventsChecker` and
  `ObjectAnnotationChecker` (`botkube.io/disable`, `botkube.io/channel`
  annotations), and a `FilterEngine` that runs the enabled filters in name
  order; `with_all_filters` registers both.
- `kubebot.format` – short event messages, code blocks and bullet lists.
- `kubebot.multierror` – `MultiError`, an exception collecting several errors.
- `kubebot.notifier` – the `Notifier` base class and `send_plaintext_message`.
- `kubebot.httpsrv` – `Server`, a WSGI server that runs until a
  `threading.Event` is set or `shutdown` is called.

## Installation

```
pip install .
```

Run the tests with:

```
pip install ".[test]"
pytest
```

## Examples

Checking access:

```python
from kubebot.kubectl.checker import Checker
from kubebot.kubectl.merger import Merger, executors_from_mapping

executors = executors_from_mapping({
    "kubectl-team-a": {
        "kubectl": {
            "enabled": True,
            "namespaces": {"include": ["team-a"]},
            "commands": {"verbs": ["get"], "resources": ["deployments"]},
            "defaultNamespace": "team-a",
        }
    }
})

merger = Merger(executors)
merged = merger.merge_for_namespace(["kubectl-team-a"], "team-a")
checker = Checker()
checker.is_verb_allowed_in_ns(merged, "get")              # True
checker.is_resource_allowed_in_ns(merged, "deployments")  # True
```

Running a command through your own runner:

```python
from kubebot.kubectl_executor import Kubectl

def run(binary, args):
    return f"{binary} {' '.join(args)}\n"

kc = Kubectl(merger, checker, run, cluster_name="prod")
kc.execute(["kubectl-team-a"], "get deployments", True)
# 'kubectl -n team-a get deployments\n'
```

Formatting an event:

```python
from kubebot.events import Event, EventType
from kubebot.format import short_message

event = Event(kind="Pod", name="web", namespace="shop",
              type=EventType.CREATE, cluster="prod")
print(short_message(event))
# Pod *shop/web* has been created in *prod* cluster
```

## What it does not do

- It does not start `kubectl` or reach a cluster. `Kubectl` calls the runner
  you pass in, `CommandGuard` calls the discovery function you pass in, and
  `KubectlCmdBuilder` takes a namespace lister function; the metadata used by
  `ObjectAnnotationChecker` also comes from a function you supply.
- It has no clients for chat platforms: `Notifier` is an abstract base class
  with no concrete implementations here.
- It does not read configuration files or offer a command-line program.