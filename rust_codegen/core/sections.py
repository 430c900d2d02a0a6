"""
Section-based extension points.

A generation point declares a closed Section enum. Customizations subclass
NamedSectionGenerator for that enum and provide one handler per member;
dispatch() folds every customization's contribution for one section into a
single Writable, in registration order.
"""

from enum import Enum
from typing import Any, Iterable, Optional, Type

from ..logging_config import get_logger
from .errors import MissingSlotHandler
from .writer import RustWriter, Writable

logger = get_logger(__name__)


class Section(Enum):
    """Base class for the slot enumeration of a generation point."""

    @property
    def handler(self) -> str:
        """Name of the customization method handling this slot."""
        return self.name.lower()


def _empty_section(writer: RustWriter) -> None:
    return None


# Contributes nothing; a valid result for any section
EMPTY_SECTION: Writable = _empty_section


def writable(template: str, *args: Any, **named: Any) -> Writable:
    """Defer writing ``template`` until the writable is run."""

    def write(writer: RustWriter) -> None:
        writer.rust(template, *args, **named)

    return write


def is_empty_section(value: Optional[Writable]) -> bool:
    return value is EMPTY_SECTION


class NamedSectionGenerator:
    """
    Base class for customizations of one generation point.

    Concrete subclasses set ``section_type`` (usually inherited from the
    generation point's customization base) and define a method for every
    member of it, named after ``Section.handler``. A class missing any
    handler is rejected when it is defined. Intermediate base classes pass
    ``abstract=True`` to skip the check.

    A subclass may override ``section()`` itself instead; then it must
    return a Writable (possibly EMPTY_SECTION) for every section, and a
    None result is reported at dispatch time.
    """

    section_type: Optional[Type[Section]] = None

    def __init_subclass__(cls, abstract: bool = False, **kwargs):
        super().__init_subclass__(**kwargs)
        if abstract:
            return

        if cls.section_type is None:
            raise TypeError(f"{cls.__name__} must declare a section_type")

        if cls.section is not NamedSectionGenerator.section:
            return

        missing = [
            member.name
            for member in cls.section_type
            if not callable(getattr(cls, member.handler, None))
        ]
        if missing:
            raise MissingSlotHandler(cls.__name__, missing)

    @property
    def name(self) -> str:
        return type(self).__name__

    def section(self, section: Section) -> Writable:
        """Return this customization's contribution to ``section``."""
        return getattr(self, section.handler)()


def dispatch(customizations: Iterable[NamedSectionGenerator], section: Section) -> Writable:
    """
    Collect every customization's contribution to one section.

    Handlers run immediately, in registration order; their writables run
    when the returned Writable is written. Errors raised by handlers
    propagate unchanged.

    Args:
        customizations: Customizations in registration order
        section: Slot being rendered

    Returns:
        Writable writing all non-empty contributions back to back, or
        EMPTY_SECTION if there are none

    Raises:
        MissingSlotHandler: If a customization returns no result
    """
    contributions = []

    for customization in customizations:
        expected = customization.section_type
        if expected is not None and not isinstance(section, expected):
            raise TypeError(
                f"{customization.name} handles {expected.__name__}, "
                f"not {type(section).__name__}"
            )

        result = customization.section(section)
        if result is None:
            raise MissingSlotHandler(customization.name, [section.name])
        if is_empty_section(result):
            continue

        logger.debug(f"{customization.name} contributes to {section.name}")
        contributions.append(result)

    if not contributions:
        return EMPTY_SECTION

    def write_all(writer: RustWriter) -> None:
        for contribution in contributions:
            contribution(writer)

    return write_all
