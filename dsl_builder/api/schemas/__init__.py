"""
Pydantic schemas for API request/response validation.

Form states and rule-tree models are reused directly from the domain package;
these schemas only wrap them for the editor and generator endpoints.
"""

# Re-export schemas for convenient imports.
from .dsl import GenerateResponse as GenerateResponse
from .dsl import OptionsResponse as OptionsResponse
from .editor import (
    ConditionRequest as ConditionRequest,
)
from .editor import (
    ConditionUpdateRequest as ConditionUpdateRequest,
)
from .editor import (
    GroupOperatorRequest as GroupOperatorRequest,
)
from .editor import (
    GroupRequest as GroupRequest,
)
from .editor import (
    GroupsRequest as GroupsRequest,
)
from .editor import (
    GroupsResponse as GroupsResponse,
)
from .editor import (
    ReconcileRequest as ReconcileRequest,
)
from .editor import (
    ValidationErrorUpdateRequest as ValidationErrorUpdateRequest,
)
from .editor import (
    ValidationsResponse as ValidationsResponse,
)
from .editor import (
    PairRequest as PairRequest,
)
from .editor import (
    PairsRequest as PairsRequest,
)
from .editor import (
    PairsResponse as PairsResponse,
)
from .editor import (
    PairUpdateRequest as PairUpdateRequest,
)
