"""
Exceptions raised during code generation.

None of these are retried: each one means the generator definition or the
model is unusable for the affected compilation unit.
"""

from typing import Sequence


class GeneratorError(Exception):
    """Base exception for code generation errors."""

    pass


class UnsupportedTraitVariant(GeneratorError):
    """The model declares a trait value this generator has no mapping for."""

    def __init__(self, trait: str, value: object, shape_id: str = None):
        self.trait = trait
        self.value = value
        self.shape_id = shape_id
        location = f" on {shape_id}" if shape_id else ""
        super().__init__(f"Unsupported value for trait '{trait}'{location}: {value!r}")


class CyclicInlineDependency(GeneratorError):
    """An inline dependency requires itself, directly or transitively."""

    def __init__(self, cycle: Sequence[str]):
        self.cycle = list(cycle)
        super().__init__(
            "Cyclic inline dependency: " + " -> ".join(self.cycle)
        )


class MissingSlotHandler(GeneratorError):
    """A customization does not cover every slot of its generation point."""

    def __init__(self, customization: str, sections: Sequence[str]):
        self.customization = customization
        self.sections = list(sections)
        super().__init__(
            f"Customization {customization} has no handler for section(s): "
            f"{', '.join(self.sections)}"
        )


class DependencyConflict(GeneratorError):
    """Two registrations of the same crate disagree on where it comes from."""

    pass


class ModelError(GeneratorError):
    """The model document is malformed or a shape lookup failed."""

    pass
