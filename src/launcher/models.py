"""Pydantic models for the launcher's bulk text result list."""

from pydantic import BaseModel, Field

from utils.config import OutputSchema


class BulkTextItem(BaseModel):
    """One item rendered by the launcher's bulk text view."""
    title: str = Field(..., description="Headline shown for the item")
    content: str = Field("", description="Body text, optionally Pango markup")
    next_content: str = Field("", description="Expanded body shown on selection")
    icon: str = Field("accessories-dictionary", description="Icon name")

    def to_payload(self, schema: OutputSchema) -> dict[str, str]:
        """Dump the item using the field names the launcher expects."""
        names = schema.field_names()
        return {names[key]: value for key, value in self.model_dump().items()}
