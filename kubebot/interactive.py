"""Interactive message model and the kubectl command builder message parts."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from enum import Enum

VERBS_DROPDOWN_COMMAND = "kc-cmd-builder --verbs"
RESOURCE_TYPES_DROPDOWN_COMMAND = "kc-cmd-builder --resource-type"
RESOURCE_NAMES_DROPDOWN_COMMAND = "kc-cmd-builder --resource-name"
RESOURCE_NAMESPACE_DROPDOWN_COMMAND = "kc-cmd-builder --namespace"
FILTER_PLAINTEXT_INPUT_COMMAND = "kc-cmd-builder --filter-query"

RUN_COMMAND_NAME = "Run command"

_INTERNAL_ERROR_TEXT = (
    "Sorry, an internal error occurred while rendering command preview. "
    "See the logs for more details."
)


class SelectType(str, Enum):
    """How a select's options are supplied."""

    STATIC = "static"
    EXTERNAL = "external"


class ButtonStyle(str, Enum):
    """Visual style of a button."""

    DEFAULT = ""
    PRIMARY = "primary"
    DANGER = "danger"


class DispatchInputAction(str, Enum):
    """When a text input dispatches its value."""

    ON_ENTER = "on_enter_pressed"
    ON_CHARACTER = "on_character_entered"


@dataclass
class OptionItem:
    """A single option of a select."""

    name: str
    value: str


@dataclass
class OptionGroup:
    """A named group of options."""

    name: str
    options: list[OptionItem] = field(default_factory=list)


@dataclass
class Select:
    """A dropdown select."""

    name: str = ""
    command: str = ""
    type: SelectType = SelectType.STATIC
    option_groups: list[OptionGroup] = field(default_factory=list)
    initial_option: OptionItem | None = None


@dataclass
class Selects:
    """A block of selects sharing one block ID."""

    id: str = ""
    items: list[Select] = field(default_factory=list)


@dataclass
class Button:
    """A button that runs a command."""

    name: str = ""
    command: str = ""
    style: ButtonStyle = ButtonStyle.DEFAULT


@dataclass
class LabelInput:
    """A labelled plain-text input."""

    id: str = ""
    dispatched_action: DispatchInputAction | None = None
    text: str = ""
    placeholder: str = ""


@dataclass
class Body:
    """Message body: a code block and/or plain text."""

    code_block: str = ""
    plaintext: str = ""


@dataclass
class Base:
    """Common header and body."""

    header: str = ""
    description: str = ""
    body: Body = field(default_factory=Body)


@dataclass
class Section:
    """A part of an interactive message."""

    base: Base = field(default_factory=Base)
    buttons: list[Button] = field(default_factory=list)
    selects: Selects = field(default_factory=Selects)
    plaintext_inputs: list[LabelInput] = field(default_factory=list)


@dataclass
class Message:
    """An interactive message sent to a chat platform."""

    base: Base = field(default_factory=Base)
    sections: list[Section] = field(default_factory=list)
    only_visible_for_you: bool = False
    replace_original: bool = False


@dataclass
class DropdownItem:
    """Name and value of a dropdown entry."""

    name: str
    value: str


def _items_from_strings(values: Iterable[str]) -> list[DropdownItem]:
    return [DropdownItem(v, v) for v in values]


def kubectl_cmd_builder_message(
    dropdowns_block_id: str,
    verbs: Select,
    extra_selects: Iterable[Select | None] = (),
    extra_sections: Iterable[Section] = (),
) -> Message:
    """Build the kubectl command builder message; None selects are skipped."""
    selects = [verbs, *(s for s in extra_selects if s is not None)]
    sections = [Section(selects=Selects(id=dropdowns_block_id, items=selects))]
    sections.extend(extra_sections)
    return Message(sections=sections, only_visible_for_you=True, replace_original=True)


def preview_section(bot_name: str, cmd: str, input_field: LabelInput) -> list[Section]:
    """Return the command preview section followed by a Run button section."""
    return [
        Section(
            base=Base(body=Body(code_block=cmd)),
            plaintext_inputs=[input_field],
        ),
        Section(
            buttons=[
                Button(
                    name=RUN_COMMAND_NAME,
                    command=f"{bot_name} {cmd}",
                    style=ButtonStyle.PRIMARY,
                )
            ]
        ),
    ]


def internal_error_section() -> Section:
    """Return a section telling the user the preview could not be rendered."""
    return Section(base=Base(body=Body(code_block=_INTERNAL_ERROR_TEXT)))


def filter_section(bot_name: str) -> LabelInput:
    """Return the filter input field."""
    # The trailing space keeps the command and the typed value apart.
    return LabelInput(
        id=f"{bot_name} {FILTER_PLAINTEXT_INPUT_COMMAND} ",
        dispatched_action=DispatchInputAction.ON_CHARACTER,
        text="Filter output",
        placeholder="Filter output by string (optional)",
    )


def verb_select(bot_name: str, verbs: Iterable[str], initial_item: str) -> Select | None:
    """Return the dropdown of kubectl verbs."""
    return _select_dropdown(
        "Select command",
        VERBS_DROPDOWN_COMMAND,
        bot_name,
        _items_from_strings(verbs),
        DropdownItem(initial_item, initial_item),
    )


def resource_type_select(
    bot_name: str, resources: Iterable[str], initial_item: str
) -> Select | None:
    """Return the dropdown of resource types."""
    return _select_dropdown(
        "Select resource",
        RESOURCE_TYPES_DROPDOWN_COMMAND,
        bot_name,
        _items_from_strings(resources),
        DropdownItem(initial_item, initial_item),
    )


def resource_names_select(
    bot_name: str, names: Iterable[str], initial_item: str
) -> Select | None:
    """Return the dropdown of resource names."""
    return _select_dropdown(
        "Select resource name",
        RESOURCE_NAMES_DROPDOWN_COMMAND,
        bot_name,
        _items_from_strings(names),
        DropdownItem(initial_item, initial_item),
    )


def resource_namespace_select(
    bot_name: str, names: Iterable[DropdownItem], initial_namespace: DropdownItem
) -> Select | None:
    """Return the dropdown of allowed namespaces."""
    return _select_dropdown(
        "Select namespace",
        RESOURCE_NAMESPACE_DROPDOWN_COMMAND,
        bot_name,
        list(names),
        initial_namespace,
    )


def _select_dropdown(
    name: str,
    cmd: str,
    bot_name: str,
    items: Sequence[DropdownItem],
    initial_item: DropdownItem,
) -> Select | None:
    options = [
        OptionItem(name=item.name, value=item.value)
        for item in items
        if item.name and item.value
    ]
    if not options:
        return None

    found_initial = any(
        opt.name == initial_item.name and opt.value == initial_item.value for opt in options
    )
    initial = OptionItem(initial_item.name, initial_item.value) if found_initial else None

    return Select(
        name=name,
        command=f"{bot_name} {cmd}",
        initial_option=initial,
        option_groups=[OptionGroup(name=name, options=options)],
    )


def empty_resource_name_dropdown() -> Select:
    """Return an external select with no options, rendered as empty."""
    return Select(
        type=SelectType.EXTERNAL,
        name="No resources found",
        initial_option=OptionItem(name="No resources found", value="no-resources"),
    )