"""
Pydantic schemas for API request/response validation.

Canvas payloads use camelCase on the wire; the graph models themselves
live in rule_canvas.graph.model.
"""

# Re-export schemas for convenient imports.
from .canvas import (
    ConnectionValidateRequest as ConnectionValidateRequest,
)
from .canvas import (
    ConnectionValidateResponse as ConnectionValidateResponse,
)
from .canvas import (
    DeleteRuleResponse as DeleteRuleResponse,
)
from .canvas import (
    MaterializeRequest as MaterializeRequest,
)
from .canvas import (
    RuleV2WithUI as RuleV2WithUI,
)
from .canvas import (
    RuleValidationResponse as RuleValidationResponse,
)
from .canvas import (
    SaveRuleRequest as SaveRuleRequest,
)
from .canvas import (
    SaveRuleResponse as SaveRuleResponse,
)
from .canvas import (
    VisibleKeysRequest as VisibleKeysRequest,
)
from .canvas import (
    VisibleKeysResponse as VisibleKeysResponse,
)
