import pytest

from kubebot.cmd_builder import BlockAction, KubectlCmdBuilder
from kubebot.interactive import (
    Base,
    Body,
    Button,
    ButtonStyle,
    DispatchInputAction,
    LabelInput,
    Message,
    OptionGroup,
    OptionItem,
    Section,
    Select,
    Selects,
    SelectType,
)
from kubebot.kubectl.guard import APIResource, APIResourceList, CommandGuard
from kubebot.kubectl.merger import EnabledKubectl, Namespaces
from kubebot.notifier import CommPlatformIntegration

BOT = "@BKTesting"
BLOCK_ID = "dropdown-block-id-403aca17d958"
BINDINGS = ["kc-read-only", "kc-delete-pod"]
EXP_KUBECTL_CMD = (
    "kubectl get pods --ignore-not-found=true -o go-template="
    + r"""'{{range .items}}{{.metadata.name}}{{"\n"}}{{end}}'"""
    + " -n default"
)


class FakeExecutor:
    def __init__(self, output="nginx2\ngrafana\nargo"):
        self.output = output
        self.command = None
        self.is_authed = None
        self.bindings = None

    def execute(self, bindings, command, is_auth_channel):
        self.bindings = bindings
        self.command = command
        self.is_authed = is_auth_channel
        return self.output


class FailingExecutor:
    def execute(self, bindings, command, is_auth_channel):
        raise RuntimeError("fake error")


class FakeMerger:
    def __init__(self, verbs, resources):
        self.verbs = verbs
        self.resources = resources

    def merge_all_enabled(self, include_bindings):
        return EnabledKubectl(
            allowed_kubectl_verb=set(self.verbs),
            allowed_kubectl_resource=set(self.resources),
            allowed_namespaces_per_resource={
                name: Namespaces(include=["default"]) for name in self.resources
            },
        )


def namespace_lister(limit):
    return ["default"]


def discovery():
    verbs = ["create", "delete", "get", "list", "patch", "update", "watch"]
    return [
        APIResourceList(
            group_version="v1",
            api_resources=[
                APIResource(name="pods", namespaced=True, kind="Pod", verbs=list(verbs)),
            ],
        ),
        APIResourceList(
            group_version="apps/v1",
            api_resources=[
                APIResource(
                    name="deployments", namespaced=True, kind="Deployment", verbs=list(verbs)
                ),
            ],
        ),
    ]


def new_builder(executor=None):
    return KubectlCmdBuilder(
        FakeMerger(["get", "describe"], ["deployments", "pods"]),
        executor if executor is not None else FakeExecutor(),
        namespace_lister,
        CommandGuard(discovery),
    )


def fix_state():
    return {
        BLOCK_ID: {
            "@BKTesting kc-cmd-builder --resource-name": BlockAction(selected_option_value="nginx2"),
            "@BKTesting kc-cmd-builder --resource-type": BlockAction(selected_option_value="pods"),
            "@BKTesting kc-cmd-builder --verbs": BlockAction(selected_option_value="get"),
        }
    }


def fix_verbs_dropdown():
    return Select(
        name="Select command",
        command="@BKTesting kc-cmd-builder --verbs",
        initial_option=OptionItem("get", "get"),
        option_groups=[
            OptionGroup(
                "Select command",
                [OptionItem("describe", "describe"), OptionItem("get", "get")],
            )
        ],
    )


def fix_resource_type_dropdown():
    return Select(
        name="Select resource",
        command="@BKTesting kc-cmd-builder --resource-type",
        initial_option=OptionItem("pods", "pods"),
        option_groups=[
            OptionGroup(
                "Select resource",
                [OptionItem("deployments", "deployments"), OptionItem("pods", "pods")],
            )
        ],
    )


def fix_namespace_dropdown():
    return Select(
        name="Select namespace",
        command="@BKTesting kc-cmd-builder --namespace",
        option_groups=[
            OptionGroup("Select namespace", [OptionItem("default (namespace)", "default")])
        ],
        initial_option=OptionItem("default (namespace)", "default"),
    )


def fix_empty_resource_names_dropdown():
    return Select(
        name="No resources found",
        type=SelectType.EXTERNAL,
        initial_option=OptionItem("No resources found", "no-resources"),
    )


def fix_resource_names_dropdown(include_initial):
    return Select(
        name="Select resource name",
        command="@BKTesting kc-cmd-builder --resource-name",
        initial_option=OptionItem("nginx2", "nginx2") if include_initial else None,
        option_groups=[
            OptionGroup(
                "Select resource name",
                [
                    OptionItem("nginx2", "nginx2"),
                    OptionItem("grafana", "grafana"),
                    OptionItem("argo", "argo"),
                ],
            )
        ],
    )


def fix_all_dropdowns(include_resource_name):
    return [
        fix_verbs_dropdown(),
        fix_resource_type_dropdown(),
        fix_resource_names_dropdown(include_resource_name),
        fix_namespace_dropdown(),
    ]


def fix_state_builder_message(preview, command, dropdowns):
    return Message(
        sections=[
            Section(selects=Selects(id=BLOCK_ID, items=list(dropdowns))),
            Section(
                base=Base(body=Body(code_block=preview)),
                plaintext_inputs=[
                    LabelInput(
                        id="@BKTesting kc-cmd-builder --filter-query ",
                        dispatched_action=DispatchInputAction.ON_CHARACTER,
                        text="Filter output",
                        placeholder="Filter output by string (optional)",
                    )
                ],
            ),
            Section(buttons=[Button(name="Run command", command=command, style=ButtonStyle.PRIMARY)]),
        ],
        only_visible_for_you=True,
        replace_original=True,
    )


@pytest.mark.parametrize(
    "args, expected",
    [
        (
            "kc-cmd-builder --verbs",
            fix_state_builder_message(
                "kubectl get pods nginx2 -n default",
                "@BKTesting kubectl get pods nginx2 -n default",
                fix_all_dropdowns(True),
            ),
        ),
        (
            "kc-cmd-builder --resource-type",
            fix_state_builder_message(
                "kubectl get pods -n default",
                "@BKTesting kubectl get pods -n default",
                fix_all_dropdowns(False),
            ),
        ),
        (
            "kc-cmd-builder --resource-name",
            fix_state_builder_message(
                "kubectl get pods nginx2 -n default",
                "@BKTesting kubectl get pods nginx2 -n default",
                fix_all_dropdowns(True),
            ),
        ),
        (
            "kc-cmd-builder --namespace",
            fix_state_builder_message(
                "kubectl get pods -n default",
                "@BKTesting kubectl get pods -n default",
                fix_all_dropdowns(False),
            ),
        ),
    ],
)
def test_command_preview(args, expected):
    executor = FakeExecutor()
    builder = new_builder(executor)

    got = builder.do(
        args.split(), CommPlatformIntegration.SOCKET_SLACK, BINDINGS, fix_state(), BOT, "header"
    )

    assert got == expected
    assert executor.command == EXP_KUBECTL_CMD
    assert executor.is_authed is True
    assert executor.bindings == BINDINGS


@pytest.mark.parametrize(
    "args, exp_prefix, exp_can_handle",
    [
        ("kc-cmd-builder --verbs my-verb", "kc-cmd-builder --verbs", True),
        ("kc-cmd-builder --resource-type my-resource-type", "kc-cmd-builder --resource-type", True),
        ("kc-cmd-builder --resource-name my-resource-name", "kc-cmd-builder --resource-name", True),
        ("kc-cmd-builder --namespace my-namespace", "kc-cmd-builder --namespace", True),
        (
            "kc-cmd-builder --namespace my-namespace other-arg-but-we-dont-care",
            "kc-cmd-builder --namespace",
            True,
        ),
        ("k", "k", True),
        ("kc", "kc", True),
        ("kubectl", "kubectl", True),
        ("kubectl get pod", "", False),
        ("helm", "", False),
        ("kc-cmd-builder", "", False),
    ],
)
def test_can_handle_and_get_prefix(args, exp_prefix, exp_can_handle):
    builder = KubectlCmdBuilder(None, None, None, CommandGuard(None))

    assert builder.can_handle(args.split()) is exp_can_handle
    assert builder.get_command_prefix(args.split()) == exp_prefix


@pytest.mark.parametrize(
    "platform",
    [
        CommPlatformIntegration.SLACK,
        CommPlatformIntegration.MATTERMOST,
        CommPlatformIntegration.TEAMS,
        CommPlatformIntegration.DISCORD,
        CommPlatformIntegration.ELASTICSEARCH,
        CommPlatformIntegration.WEBHOOK,
    ],
)
def test_error_message_on_other_platforms(platform):
    builder = KubectlCmdBuilder(None, None, None, None)

    got = builder.do(["kc"], platform, None, None, "", "header")

    assert got == Message(
        base=Base(description="header", body=Body(plaintext="Please specify the kubectl command"))
    )


def test_should_return_initial_message():
    builder = KubectlCmdBuilder(
        FakeMerger(["get", "describe"], ["deployments", "pods"]), None, None, CommandGuard(discovery)
    )
    verbs = fix_verbs_dropdown()
    verbs.initial_option = None
    expected = Message(
        sections=[Section(selects=Selects(items=[verbs]))],
        only_visible_for_you=True,
        replace_original=False,
    )

    got = builder.do(
        ["kc-cmd-builder"], CommPlatformIntegration.SOCKET_SLACK, None, None, BOT, "cmdHeader"
    )

    assert len(got.sections) == 1
    assert got.sections[0].selects.id
    got.sections[0].selects.id = ""
    assert got == expected


def test_resource_name_not_printed_if_executor_fails():
    builder = new_builder(FailingExecutor())
    expected = fix_state_builder_message(
        "kubectl get pods -n default",
        "@BKTesting kubectl get pods -n default",
        [
            fix_verbs_dropdown(),
            fix_resource_type_dropdown(),
            fix_empty_resource_names_dropdown(),
            fix_namespace_dropdown(),
        ],
    )

    got = builder.do(
        ["kc-cmd-builder", "--verbs"],
        CommPlatformIntegration.SOCKET_SLACK,
        ["kc-read-only"],
        fix_state(),
        BOT,
        "header",
    )

    assert got == expected


def test_no_verbs_enabled_returns_hint():
    builder = KubectlCmdBuilder(FakeMerger([], ["pods"]), None, None, CommandGuard(discovery))

    got = builder.do(["kc"], CommPlatformIntegration.SOCKET_SLACK, ["x"], None, BOT, "header")

    assert got.base.description == "header"
    assert got.base.body.plaintext.startswith("No `kubectl` commands are enabled in this channel.")


def test_unknown_builder_command_raises():
    builder = new_builder()

    with pytest.raises(ValueError):
        builder.do(
            ["kc-cmd-builder", "--unknown"],
            CommPlatformIntegration.SOCKET_SLACK,
            BINDINGS,
            fix_state(),
            BOT,
            "header",
        )


def test_filter_is_added_to_preview():
    state = fix_state()
    state["filter-block kc-cmd-builder --filter-query"] = {
        "@BKTesting kc-cmd-builder --filter-query ": BlockAction(value="foo"),
    }
    builder = new_builder()

    got = builder.do(
        ["kc-cmd-builder", "--filter-query"],
        CommPlatformIntegration.SOCKET_SLACK,
        BINDINGS,
        state,
        BOT,
        "header",
    )

    assert got.sections[0].selects.id == BLOCK_ID
    assert got.sections[1].base.body.code_block == (
        'kubectl get pods nginx2 -n default --filter="foo"'
    )


def test_long_resource_names_are_truncated():
    long_name = "a" * 80
    builder = new_builder(FakeExecutor(output=f"{long_name}\r\n\nshort\n"))

    got = builder.do(
        ["kc-cmd-builder", "--verbs"],
        CommPlatformIntegration.SOCKET_SLACK,
        BINDINGS,
        fix_state(),
        BOT,
        "header",
    )

    names_select = got.sections[0].selects.items[2]
    options = [opt.name for opt in names_select.option_groups[0].options]
    assert options == ["a" * 72 + "...", "short"]
    assert names_select.initial_option is None