from typing import Any, Callable, Type

from pydantic import BaseModel

from .interfaces import Presenter


class ModelPresenter(Presenter):
    """Presents raw entity dictionaries as instances of a pydantic model."""

    def __init__(self, model: Type[BaseModel]):
        self.model = model

    def present(self, value: Any) -> Any:
        if isinstance(value, self.model):
            return value
        return self.model.model_validate(value)


class CallablePresenter(Presenter):
    """Adapts a plain function to the presenter contract."""

    def __init__(self, func: Callable[[Any], Any]):
        self.func = func

    def present(self, value: Any) -> Any:
        return self.func(value)
