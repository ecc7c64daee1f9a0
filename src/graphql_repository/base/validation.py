# src/graphql_repository/base/validation.py
import logging
from typing import Any, Dict, List, Mapping, Optional, Type

import pydantic
from pydantic import BaseModel

from .exceptions import ValidationError
from .interfaces import ValidationRule, Validator

log = logging.getLogger(__name__)


def _location(loc: tuple) -> str:
    return ".".join(str(part) for part in loc) or "__root__"


def field_errors_from(exc: pydantic.ValidationError) -> Dict[str, List[str]]:
    """Groups pydantic error messages by dotted field location."""
    errors: Dict[str, List[str]] = {}
    for error in exc.errors():
        errors.setdefault(_location(error.get("loc", ())), []).append(error.get("msg", ""))
    return errors


class PydanticValidator(Validator):
    """
    Validates attributes with pydantic models, one model per rule.

    When no update model is given, updates are checked against the create
    model with every field treated as optional: only errors for attributes
    that are actually present are reported.
    """

    def __init__(
        self,
        create_model: Type[BaseModel],
        update_model: Optional[Type[BaseModel]] = None,
    ):
        self.create_model = create_model
        self.update_model = update_model

    def validate(self, attributes: Mapping[str, Any], rule: ValidationRule) -> None:
        model = self.create_model
        partial = False
        if rule is ValidationRule.UPDATE:
            if self.update_model is not None:
                model = self.update_model
            else:
                partial = True

        try:
            model.model_validate(dict(attributes))
        except pydantic.ValidationError as e:
            errors = field_errors_from(e)
            if partial:
                errors = {
                    loc: msgs
                    for loc, msgs in errors.items()
                    if loc.split(".")[0] in attributes
                }
                if not errors:
                    return
            log.debug(f"{model.__name__} rejected attributes for {rule.value}: {errors}")
            raise ValidationError(errors) from e
