"""Interactive, dropdown-driven construction of kubectl commands."""

from __future__ import annotations

import dataclasses
import json
import logging
import re
import uuid
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Protocol

from kubebot.interactive import (
    FILTER_PLAINTEXT_INPUT_COMMAND,
    RESOURCE_NAMES_DROPDOWN_COMMAND,
    RESOURCE_NAMESPACE_DROPDOWN_COMMAND,
    RESOURCE_TYPES_DROPDOWN_COMMAND,
    VERBS_DROPDOWN_COMMAND,
    Base,
    Body,
    DropdownItem,
    Message,
    Section,
    Select,
    empty_resource_name_dropdown,
    filter_section,
    internal_error_section,
    kubectl_cmd_builder_message,
    preview_section,
    resource_names_select,
    resource_namespace_select,
    resource_type_select,
    verb_select,
)
from kubebot.kubectl.guard import Resource
from kubebot.kubectl.merger import EnabledKubectl, Namespaces
from kubebot.kubectl_executor import DEFAULT_NAMESPACE, KUBECTL_ALIASES
from kubebot.notifier import CommPlatformIntegration

KUBECTL_COMMAND_NAME = "kubectl"
DROPDOWN_ITEMS_LIMIT = 100
NO_KUBECTL_COMMANDS_IN_CHANNEL = (
    "No `kubectl` commands are enabled in this channel. To learn how to enable them, "
    "visit https://botkube.io/docs/configuration/executor."
)
KUBECTL_MISSING_COMMAND_MSG = "Please specify the kubectl command"

_KNOWN_CMD_PREFIXES = frozenset(
    {
        VERBS_DROPDOWN_COMMAND,
        RESOURCE_TYPES_DROPDOWN_COMMAND,
        RESOURCE_NAMES_DROPDOWN_COMMAND,
        RESOURCE_NAMESPACE_DROPDOWN_COMMAND,
        FILTER_PLAINTEXT_INPUT_COMMAND,
    }
)

_NAMES_TEMPLATE = r"""'{{range .items}}{{.metadata.name}}{{"\n"}}{{end}}'"""
_MAX_OPTION_TEXT = 75
_LINE_SPLIT = re.compile(r"[\r\n]+")


class _Merger(Protocol):
    def merge_all_enabled(self, include_bindings: Iterable[str]) -> EnabledKubectl: ...


class _Executor(Protocol):
    def execute(self, bindings: Sequence[str], command: str, is_auth_channel: bool) -> str: ...


class _Guard(Protocol):
    def filter_supported_verbs(self, all_verbs: Iterable[str]) -> list[str]: ...

    def get_allowed_resources_for_verb(
        self, verb: str, all_configured_resources: Iterable[str]
    ) -> list[Resource]: ...

    def get_resource_details(self, selected_verb: str, resource_type: str) -> Resource: ...


NamespaceLister = Callable[[int], Iterable[str]]


@dataclass
class BlockAction:
    """State of one interactive element: the selected option or typed text."""

    selected_option_value: str = ""
    value: str = ""


BlockActionStates = Mapping[str, Mapping[str, BlockAction]]


@dataclass
class _StateDetails:
    dropdowns_block_id: str = ""
    verb: str = ""
    namespace: str = ""
    resource_type: str = ""
    resource_name: str = ""
    filter: str = ""


def _overflow_sentence(lines: Iterable[str]) -> list[str]:
    return [line if len(line) <= _MAX_OPTION_TEXT else line[:72] + "..." for line in lines]


def _non_empty_lines(text: str) -> list[str]:
    return [line for line in _LINE_SPLIT.split(text) if line]


def _contains(select: Select | None, value: str) -> bool:
    return (
        select is not None
        and select.initial_option is not None
        and select.initial_option.value == value
    )


def _with_namespace_suffix(item: DropdownItem) -> DropdownItem:
    if item.name == "default":
        return DropdownItem(name=f"{item.name} (namespace)", value=item.value)
    return item


class KubectlCmdBuilder:
    """Handles interactive selection of kubectl verb, resource, name and namespace."""

    def __init__(
        self,
        merger: _Merger | None,
        executor: _Executor | None,
        namespace_lister: NamespaceLister | None,
        guard: _Guard | None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._merger = merger
        self._executor = executor
        self._namespace_lister = namespace_lister
        self._guard = guard
        self._log = logger or logging.getLogger(__name__)

    def can_handle(self, args: Sequence[str]) -> bool:
        """Return True if the args start with a known builder command."""
        return self.get_command_prefix(args) != ""

    def get_command_prefix(self, args: Sequence[str]) -> str:
        """Return the command prefix if it is known, else an empty string."""
        if not args:
            return ""
        if len(args) == 1:
            return args[0] if args[0] in KUBECTL_ALIASES else ""
        prefix = f"{args[0]} {args[1]}"
        return prefix if prefix in _KNOWN_CMD_PREFIXES else ""

    def do(
        self,
        args: Sequence[str],
        platform: CommPlatformIntegration | str,
        bindings: Sequence[str] | None,
        state: BlockActionStates | None,
        bot_name: str,
        header: str,
    ) -> Message:
        """Render the builder message for the given command and interaction state."""
        if platform != CommPlatformIntegration.SOCKET_SLACK:
            self._log.debug(
                "Interactive kubectl command builder is not supported on %s platform", platform
            )
            return self._message(header, KUBECTL_MISSING_COMMAND_MSG)

        bindings = list(bindings or [])
        all_verbs, all_types, default_ns = self._enabled_kubectl_details(bindings)
        if not all_verbs:
            return self._message(header, NO_KUBECTL_COMMANDS_IN_CHANNEL)

        all_verbs = self._guard.filter_supported_verbs(all_verbs)

        if len(args) == 1:
            return self._initial_message(bot_name, all_verbs)

        details = self._extract_state_details(bot_name, state)
        if not details.namespace:
            details.namespace = default_ns

        cmd = f"{args[0]} {args[1]}"
        if cmd not in _KNOWN_CMD_PREFIXES:
            raise ValueError(f"unknown command {cmd!r}")

        # Choosing a new resource type or namespace invalidates the resource name.
        if cmd in (RESOURCE_TYPES_DROPDOWN_COMMAND, RESOURCE_NAMESPACE_DROPDOWN_COMMAND):
            details.resource_name = ""

        try:
            return self._render_message(bot_name, details, bindings, all_verbs, all_types)
        except Exception as err:
            self._log.error(
                "Cannot render the kubectl command builder (%s). Returning empty message.", err
            )
            raise

    def _initial_message(self, bot_name: str, all_verbs: Sequence[str]) -> Message:
        # One ID for the whole interaction keeps the chat client's dropdown state.
        block_id = str(uuid.uuid4())
        verbs = verb_select(bot_name, all_verbs, "")
        if verbs is None:
            raise ValueError("verbs dropdown select cannot be empty")
        msg = kubectl_cmd_builder_message(block_id, verbs)
        msg.replace_original = False
        return msg

    def _render_message(
        self,
        bot_name: str,
        details: _StateDetails,
        bindings: Sequence[str],
        all_verbs: Sequence[str],
        all_types: Sequence[str],
    ) -> Message:
        details = dataclasses.replace(details)
        verbs = verb_select(bot_name, all_verbs, details.verb)
        if verbs is None:
            raise ValueError("verbs dropdown select cannot be empty")

        matching_types = self._allowed_resources_select(
            bot_name, details.verb, all_types, details.resource_type
        )

        if matching_types is None:
            details.resource_type = ""
            details.resource_name = ""
            details.namespace = ""
            preview = self._build_command_preview(bot_name, details)
            return kubectl_cmd_builder_message(
                details.dropdowns_block_id, verbs, extra_sections=preview
            )

        if not _contains(matching_types, details.resource_type):
            return kubectl_cmd_builder_message(
                details.dropdowns_block_id, verbs, extra_selects=[matching_types]
            )

        res_names = self._resource_names_select(bot_name, bindings, details)
        ns_names = self._namespace_select(bot_name, bindings, details)

        if not _contains(res_names, details.resource_name):
            details.resource_name = ""
        if not _contains(ns_names, details.namespace):
            details.namespace = ""

        preview = self._build_command_preview(bot_name, details)
        return kubectl_cmd_builder_message(
            details.dropdowns_block_id,
            verbs,
            extra_selects=[matching_types, res_names, ns_names],
            extra_sections=preview,
        )

    def _resource_names_select(
        self, bot_name: str, bindings: Sequence[str], details: _StateDetails
    ) -> Select | None:
        if not details.resource_type:
            return empty_resource_name_dropdown()
        cmd = (
            f"{KUBECTL_COMMAND_NAME} get {details.resource_type} "
            f"--ignore-not-found=true -o go-template={_NAMES_TEMPLATE}"
        )
        if details.namespace:
            cmd = f"{cmd} -n {details.namespace}"

        try:
            out = self._executor.execute(bindings, cmd, True)
        except Exception as err:
            self._log.error(
                "Cannot fetch resource names (%s). Returning empty resource name dropdown.", err
            )
            return empty_resource_name_dropdown()

        lines = _non_empty_lines(out)
        if not lines:
            return empty_resource_name_dropdown()
        return resource_names_select(bot_name, _overflow_sentence(lines), details.resource_name)

    def _namespace_select(
        self, bot_name: str, bindings: Sequence[str], details: _StateDetails
    ) -> Select | None:
        try:
            resource = self._guard.get_resource_details(details.verb, details.resource_type)
        except Exception as err:
            self._log.error("Cannot fetch resource details (%s), ignoring namespace dropdown.", err)
            return None
        if not resource.namespaced:
            self._log.debug("Resource is not namespace-scoped, ignore namespace dropdown...")
            return None

        try:
            cluster_namespaces = list(self._namespace_lister(DROPDOWN_ITEMS_LIMIT))
        except Exception as err:
            self._log.error(
                "Cannot fetch all available Kubernetes namespaces (%s), ignoring namespace dropdown.",
                err,
            )
            return None

        kc = self._merger.merge_all_enabled(bindings)
        allowed = kc.allowed_namespaces_per_resource.get(details.resource_type, Namespaces())

        initial = _with_namespace_suffix(DropdownItem(details.namespace, details.namespace))
        items = []
        for name in cluster_namespaces:
            if not allowed.is_allowed(name):
                self._log.debug("Namespace %r is not allowed, so skipping it.", name)
                continue
            item = DropdownItem(name, name)
            if item.value == initial.value:
                item = _with_namespace_suffix(item)
            items.append(item)

        return resource_namespace_select(bot_name, items, initial)

    def _enabled_kubectl_details(
        self, bindings: Sequence[str]
    ) -> tuple[list[str], list[str], str]:
        enabled = self._merger.merge_all_enabled(bindings)
        verbs = sorted(enabled.allowed_kubectl_verb)
        resources = sorted(enabled.allowed_kubectl_resource)
        return verbs, resources, enabled.default_namespace or DEFAULT_NAMESPACE

    def _allowed_resources_select(
        self, bot_name: str, verb: str, resources: Sequence[str], resource_type: str
    ) -> Select | None:
        allowed = self._guard.get_allowed_resources_for_verb(verb, resources)
        if not allowed:
            return None
        return resource_type_select(bot_name, [r.name for r in allowed], resource_type)

    @staticmethod
    def _extract_state_details(bot_name: str, state: BlockActionStates | None) -> _StateDetails:
        details = _StateDetails()
        if state is None:
            return details
        for block_id, actions in state.items():
            if FILTER_PLAINTEXT_INPUT_COMMAND not in block_id:
                details.dropdowns_block_id = block_id
            for action_id, action in actions.items():
                key = action_id.removeprefix(bot_name).strip()
                if key == VERBS_DROPDOWN_COMMAND:
                    details.verb = action.selected_option_value
                elif key == RESOURCE_TYPES_DROPDOWN_COMMAND:
                    details.resource_type = action.selected_option_value
                elif key == RESOURCE_NAMES_DROPDOWN_COMMAND:
                    details.resource_name = action.selected_option_value
                elif key == RESOURCE_NAMESPACE_DROPDOWN_COMMAND:
                    details.namespace = action.selected_option_value
                elif key == FILTER_PLAINTEXT_INPUT_COMMAND:
                    details.filter = action.value
        return details

    def _build_command_preview(self, bot_name: str, details: _StateDetails) -> list[Section]:
        try:
            resource = self._guard.get_resource_details(details.verb, details.resource_type)
        except Exception as err:
            self._log.error("Cannot get resource details for %r: %s", details, err)
            return [internal_error_section()]

        if resource.slash_separated_in_command and not details.resource_name:
            # Without the name such a command would be invalid anyway.
            return []

        cmd = f"{KUBECTL_COMMAND_NAME} {details.verb} {details.resource_type}"
        if details.resource_name:
            sep = "/" if resource.slash_separated_in_command else " "
            cmd = f"{cmd}{sep}{details.resource_name}"
        if resource.namespaced and details.namespace:
            cmd = f"{cmd} -n {details.namespace}"
        if details.filter:
            cmd = f"{cmd} --filter={json.dumps(details.filter, ensure_ascii=False)}"

        return preview_section(bot_name, cmd, filter_section(bot_name))

    @staticmethod
    def _message(header: str, msg: str) -> Message:
        return Message(base=Base(description=header, body=Body(plaintext=msg)))