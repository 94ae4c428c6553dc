"""Base Pydantic models with strict defaults.

All configuration schemas inherit from SpatialUnitsBaseModel so parameter,
user, CLI and internal configs validate the same way. FrozenModel is the
immutable variant used for process declarations and run results.
"""

from pydantic import BaseModel, ConfigDict


class SpatialUnitsBaseModel(BaseModel):
    """Base model for all configuration schemas.

    Enforces strict validation:
    - No extra fields allowed
    - Validates assignments after initialization
    - Strips whitespace from strings
    """

    model_config = ConfigDict(
        extra='forbid',
        validate_assignment=True,
        use_enum_values=True,
        str_strip_whitespace=True,
    )


class FrozenModel(BaseModel):
    """Immutable model for declarations and results.

    Arbitrary types are allowed so parameter declarations can carry Python
    types and results can carry datastore handles.
    """

    model_config = ConfigDict(
        extra='forbid',
        frozen=True,
        arbitrary_types_allowed=True,
    )
