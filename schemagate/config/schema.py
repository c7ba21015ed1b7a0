"""Configuration schema for the preprocessor using Pydantic for validation.

The configuration is a flat record of feature toggles. Gating predicates
receive the whole record, so new toggles can be added (as declared fields or
as extra keys) without changing the shape of the preprocessing algorithm.
"""

from typing import Any, Dict

from pydantic import BaseModel


class PreprocessorConfig(BaseModel):
    """Feature toggles evaluated by conditional type nodes and enum values.

    Attributes:
        beta_features_enabled: Whether beta-gated schema surface is included.
    """

    beta_features_enabled: bool = False

    model_config = {"extra": "allow"}  # Allow extra toggles for custom predicates

    @classmethod
    def default(cls) -> "PreprocessorConfig":
        """Return the production configuration (every toggle off)."""
        return cls()

    def get(self, name: str, default: Any = None) -> Any:
        """Read a toggle by name, including extra toggles.

        Args:
            name: Toggle name.
            default: Value returned when the toggle is not set.

        Returns:
            The toggle value or ``default``.
        """
        if name in type(self).model_fields:
            return getattr(self, name)
        extra = self.model_extra or {}
        return extra.get(name, default)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PreprocessorConfig":
        """Create configuration from dictionary.

        Args:
            data: Configuration dictionary.

        Returns:
            PreprocessorConfig instance.

        Raises:
            ValidationError: If configuration is invalid.
        """
        return cls.model_validate(data)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return self.model_dump()
