"""
Service configuration generation point.

Renders the ``Config`` struct and its ``Builder``. Customizations add
fields, builder methods and build-time setup through the ServiceConfig
sections; the preamble slot runs inside ``build()`` before the ``Config``
literal, so bindings it declares are visible to the build slot.
"""

from typing import Sequence

from ..core.sections import NamedSectionGenerator, Section, dispatch
from ..core.writer import RustWriter


class ServiceConfig(Section):
    """Slots of the service configuration."""

    CONFIG_STRUCT = "config_struct"
    CONFIG_IMPL = "config_impl"
    BUILDER_STRUCT = "builder_struct"
    BUILDER_IMPL = "builder_impl"
    BUILDER_PREAMBLE = "builder_preamble"
    BUILDER_BUILD = "builder_build"


class ConfigCustomization(NamedSectionGenerator, abstract=True):
    """Base class for customizations of the service configuration."""

    section_type = ServiceConfig


class ServiceConfigGenerator:
    """Writes the service Config and its Builder."""

    def __init__(self, customizations: Sequence[ConfigCustomization] = ()):
        self.customizations = list(customizations)

    def _section(self, section: ServiceConfig):
        return dispatch(self.customizations, section)

    def render(self, writer: RustWriter) -> None:
        writer.rust(
            """
            pub struct Config {
                #W
            }

            impl Config {
                pub fn builder() -> Builder {
                    Builder::default()
                }
                #W
            }

            #[derive(Default)]
            pub struct Builder {
                #W
            }

            impl Builder {
                pub fn new() -> Self {
                    Self::default()
                }
                #W
                pub fn build(self) -> Config {
                    #W
                    Config {
                        #W
                    }
                }
            }
            """,
            self._section(ServiceConfig.CONFIG_STRUCT),
            self._section(ServiceConfig.CONFIG_IMPL),
            self._section(ServiceConfig.BUILDER_STRUCT),
            self._section(ServiceConfig.BUILDER_IMPL),
            self._section(ServiceConfig.BUILDER_PREAMBLE),
            self._section(ServiceConfig.BUILDER_BUILD),
        )
