"""Generator configuration."""

from dataclasses import dataclass, field

from dataclasses_json import DataClassJsonMixin, config


@dataclass
class GeneratorConfig(DataClassJsonMixin):
    """Options controlling where and how code is generated.

    Attributes:
        package: Root import package of the generated modules.
        namespace_prefix: Leading namespace stripped from every record package.
        runtime_import: Import path of the runtime support library.
    """

    package: str = "protocol"
    namespace_prefix: str = field(default="", metadata=config(field_name="namespacePrefix"))
    runtime_import: str = field(
        default="packetforge.proto", metadata=config(field_name="runtimeImport")
    )
