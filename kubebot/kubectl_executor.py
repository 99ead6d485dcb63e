"""Runs kubectl commands requested from chat, within the configured limits."""

from __future__ import annotations

import logging
import re
import shlex
from collections.abc import Callable, Iterable, Sequence

from kubebot.kubectl.checker import Checker
from kubebot.kubectl.merger import ALL_NAMESPACE_INDICATOR, Merger

KUBECTL_BINARY = "kubectl"
KUBECTL_ALIASES = ("kubectl", "kc", "k")
DEFAULT_NAMESPACE = "default"

_NOT_AUTHORIZED_MSG = (
    "Sorry, this channel is not authorized to execute kubectl command on cluster '{cluster}'."
)
_NOT_ALLOWED_VERB_MSG = (
    "Sorry, the kubectl '{verb}' command cannot be executed in the '{ns}' Namespace "
    "on cluster '{cluster}'. Use 'commands list' to see allowed commands."
)
_NOT_ALLOWED_VERB_IN_ALL_NS_MSG = (
    "Sorry, the kubectl '{verb}' command cannot be executed for all Namespaces "
    "on cluster '{cluster}'. Use 'commands list' to see allowed commands."
)
_NOT_ALLOWED_KIND_MSG = (
    "Sorry, the kubectl command is not authorized to work with '{resource}' resources "
    "in the '{ns}' Namespace on cluster '{cluster}'. Use 'commands list' to see allowed commands."
)
_NOT_ALLOWED_KIND_IN_ALL_NS_MSG = (
    "Sorry, the kubectl command is not authorized to work with '{resource}' resources "
    "for all Namespaces on cluster '{cluster}'. Use 'commands list' to see allowed commands."
)
_FLAG_AFTER_VERB_MSG = (
    "Please specify the resource name after the verb, and all flags after the resource name. "
    "Format <verb> <resource> [flags]"
)

_FOLLOW_FLAG = "--follow"
_ABBR_FOLLOW_FLAG = "-f"
_WATCH_FLAG = "--watch"
_ABBR_WATCH_FLAG = "-w"
_CLUSTER_FLAG = "--cluster-name"

# Commands whose second argument is not a resource type, e.g. ``kubectl logs foo``.
_RESOURCELESS_COMMANDS = frozenset(
    {
        "exec",
        "logs",
        "attach",
        "auth",
        "api-versions",
        "cluster-info",
        "cordon",
        "drain",
        "uncordon",
        "run",
        "api-resources",
    }
)

_ANSI_CODE = re.compile(r"\x1b\[[0-9;]*m")
_CLUSTER_NAME_RE = re.compile(r"--cluster-name[= ]+['\"]?([^\s'\"]*)")

_TRUE_VALUES = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_VALUES = frozenset({"0", "f", "F", "FALSE", "false", "False"})

CommandRunner = Callable[[str, list[str]], str]


class ExecutionCommandError(Exception):
    """A command was rejected or failed; the message is meant for the user."""


def get_cluster_name_from_command(cmd: str) -> str:
    """Return the value of ``--cluster-name`` in a command, or an empty string."""
    match = _CLUSTER_NAME_RE.search(cmd)
    return match.group(1) if match else ""


def _strip_unknown_flag_value(args: list[str], i: int) -> int:
    if i < len(args) and not args[i].startswith("-"):
        return i + 1
    return i


def _scan_flag(args: Sequence[str], long_name: str, short_name: str, is_bool: bool) -> str | None:
    """Return the last value given for one flag, ignoring all other flags."""
    args = list(args)
    value: str | None = None
    i = 0
    while i < len(args):
        arg = args[i]
        i += 1
        if len(arg) < 2 or not arg.startswith("-"):
            continue
        if arg == "--":
            break
        if arg.startswith("--"):
            name, eq, val = arg[2:].partition("=")
            if not name or name[0] in "-=":
                raise ValueError(f"bad flag syntax: {arg}")
            if name != long_name:
                if name == "help":
                    raise ValueError("pflag: help requested")
                if not eq:
                    i = _strip_unknown_flag_value(args, i)
                continue
            if eq:
                value = val
            elif is_bool:
                value = "true"
            elif i < len(args):
                value = args[i]
                i += 1
            else:
                raise ValueError(f"flag needs an argument: --{long_name}")
            continue

        shorts = arg[1:]
        while shorts:
            char, rest = shorts[0], shorts[1:]
            if char != short_name:
                if char == "h":
                    raise ValueError("pflag: help requested")
                if len(shorts) > 2 and shorts[1] == "=":
                    break
                i = _strip_unknown_flag_value(args, i)
                shorts = rest
                continue
            if rest.startswith("="):
                value = rest[1:]
                break
            if is_bool:
                value = "true"
                shorts = rest
                continue
            if rest:
                value = rest
                break
            if i < len(args):
                value = args[i]
                i += 1
                break
            raise ValueError(f"flag needs an argument: '{short_name}' in -{short_name}")
    return value


def _parse_bool(value: str, flag: str) -> bool:
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f'invalid argument "{value}" for "{flag}" flag')


class Kubectl:
    """Executes kubectl commands through a command runner."""

    def __init__(
        self,
        merger: Merger,
        checker: Checker,
        runner: CommandRunner | None,
        cluster_name: str = "",
        logger: logging.Logger | None = None,
    ) -> None:
        self._merger = merger
        self._checker = checker
        self._runner = runner
        self.cluster_name = cluster_name
        self._log = logger or logging.getLogger(__name__)
        self._aliases = KUBECTL_ALIASES

    def can_handle(self, bindings: Iterable[str], args: Sequence[str]) -> bool:
        """Return True if the args start with a verb enabled for the bindings."""
        if not args:
            return False
        verb = self.get_verb(args)
        return self._checker.is_known_verb(self._merger.merge_all_enabled_verbs(bindings), verb)

    def get_verb(self, args: Sequence[str]) -> str:
        """Return the kubectl verb, skipping a leading alias."""
        if not args:
            return ""
        if len(args) >= 2 and args[0] in self._aliases:
            return args[1]
        return args[0]

    def get_command_prefix(self, args: Sequence[str]) -> str:
        """Return the verb, prefixed with the alias if one was given."""
        if not args:
            return ""
        if len(args) >= 2 and args[0] in self._aliases:
            return f"{args[0]} {args[1]}"
        return args[0]

    def args_without_alias(self, msg: str) -> list[str]:
        """Split a command message into args, dropping a leading alias."""
        try:
            parts = shlex.split(msg.strip())
        except ValueError as err:
            raise ValueError(f"while parsing the command message into args: {err}") from err
        if len(parts) >= 2 and parts[0] in self._aliases:
            return parts[1:]
        return parts

    def execute(self, bindings: Sequence[str], command: str, is_auth_channel: bool) -> str:
        """Check and run a kubectl command, returning its output.

        Raises ExecutionCommandError when the command is not allowed or fails.
        Returns an empty string when access is restricted but the command does
        not explicitly target this cluster.
        """
        bindings = list(bindings)
        self._log.debug(
            "Handling command %r (auth channel: %s)...", command, is_auth_channel
        )

        args = self.args_without_alias(command)
        if not args:
            raise ValueError("command cannot be empty")

        cluster = self.cluster_name
        verb = args[0]
        resource = args[1].partition("/")[0] if len(args) >= 2 else ""

        try:
            execution_ns = self._command_namespace(args)
        except ValueError as err:
            raise ValueError(f"while extracting Namespace from command: {err}") from err
        if not execution_ns:
            execution_ns = self._find_default_namespace(bindings)
            args = ["-n", execution_ns, *(a for a in args if a)]

        kc_config = self._merger.merge_for_namespace(bindings, execution_ns)

        if not is_auth_channel and kc_config.restrict_access:
            error = ExecutionCommandError(_NOT_AUTHORIZED_MSG.format(cluster=cluster))
            if get_cluster_name_from_command(command) == cluster:
                raise error
            self._log.debug("Skipping kubectl verbose message: %s", error)
            return ""

        all_ns = execution_ns == ALL_NAMESPACE_INDICATOR
        if not self._checker.is_verb_allowed_in_ns(kc_config, verb):
            if all_ns:
                raise ExecutionCommandError(
                    _NOT_ALLOWED_VERB_IN_ALL_NS_MSG.format(verb=verb, cluster=cluster)
                )
            raise ExecutionCommandError(
                _NOT_ALLOWED_VERB_MSG.format(verb=verb, ns=execution_ns, cluster=cluster)
            )

        if verb not in _RESOURCELESS_COMMANDS and resource:
            if not resource[0].isalpha():
                raise ExecutionCommandError(_FLAG_AFTER_VERB_MSG)
            if not self._checker.is_resource_allowed_in_ns(kc_config, resource):
                if all_ns:
                    raise ExecutionCommandError(
                        _NOT_ALLOWED_KIND_IN_ALL_NS_MSG.format(resource=resource, cluster=cluster)
                    )
                raise ExecutionCommandError(
                    _NOT_ALLOWED_KIND_MSG.format(
                        resource=resource, ns=execution_ns, cluster=cluster
                    )
                )

        if self._runner is None:
            raise ExecutionCommandError("no command runner configured")
        final_args = self._final_args(args)
        try:
            out = self._runner(KUBECTL_BINARY, final_args)
        except Exception as err:
            output = getattr(err, "output", "") or ""
            if isinstance(output, bytes):
                output = output.decode(errors="replace")
            raise ExecutionCommandError(f"{_ANSI_CODE.sub('', output)}{err}") from err
        return _ANSI_CODE.sub("", out)

    @staticmethod
    def _final_args(args: Iterable[str]) -> list[str]:
        final: list[str] = []
        skip_next = False
        for arg in args:
            if skip_next:
                skip_next = False
                continue
            if arg == _ABBR_FOLLOW_FLAG or arg.startswith(_FOLLOW_FLAG):
                continue
            if arg == _ABBR_WATCH_FLAG or arg.startswith(_WATCH_FLAG):
                continue
            if arg.startswith(_CLUSTER_FLAG):
                skip_next = arg == _CLUSTER_FLAG
                continue
            final.append(arg)
        return final

    @staticmethod
    def _command_namespace(args: Sequence[str]) -> str:
        # With --all-namespaces kubectl ignores --namespace.
        all_ns = _scan_flag(args, "all-namespaces", "A", is_bool=True)
        if all_ns is not None and _parse_bool(all_ns, "all-namespaces"):
            return ALL_NAMESPACE_INDICATOR
        return _scan_flag(args, "namespace", "n", is_bool=False) or ""

    def _find_default_namespace(self, bindings: Sequence[str]) -> str:
        cfg = self._merger.merge_all_enabled(bindings)
        return cfg.default_namespace or DEFAULT_NAMESPACE