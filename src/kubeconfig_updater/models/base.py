"""Base model configuration for all Pydantic models."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class KubeconfigBaseModel(BaseModel):
    """Base model with common configuration.

    Conventions:
    - Python field names are lowercase snake_case
    - Wire (JSON) names are lowerCamelCase, matching the backend's protobuf JSON
    - Both names are accepted on input
    """

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        use_enum_values=True,
        alias_generator=to_camel,
    )

    def to_wire(self) -> dict:
        """Serialize using wire (camelCase) field names."""
        return self.model_dump(mode="json", by_alias=True)
