"""Explicit registry of the properties and callables a session exposes.

Host integrations (the HTTP API, the CLI) never touch the session's
attributes directly. They look properties up by name here, read and
write them through the registered getter/setter, and subscribe to
change notifications.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

logger = logging.getLogger(__name__)


class PropertyDescriptor(BaseModel):
    """A named, typed property with its accessor functions."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str
    description: str = ""
    value_type: type = Field(description="Python type of the property value")
    getter: Callable[[], Any]
    setter: Callable[[Any], None] | None = None

    @property
    def read_only(self) -> bool:
        return self.setter is None

    def coerce(self, value: Any) -> Any:
        """Validate a raw value (e.g. "on", "true", 1) into the property type."""
        return TypeAdapter(self.value_type).validate_python(value)


class CallableDescriptor(BaseModel):
    """A named action with ordered, typed parameters."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str
    description: str = ""
    parameters: tuple[tuple[str, type], ...] = ()
    func: Callable[..., Any]


class PropertyChange(BaseModel):
    """Notification that a property's observable value changed."""

    model_config = ConfigDict(frozen=True)

    name: str
    value: Any


ChangeListener = Callable[[PropertyChange], None]


class PropertyRegistry:
    """Name-indexed properties and callables plus change listeners."""

    def __init__(self) -> None:
        self._properties: dict[str, PropertyDescriptor] = {}
        self._callables: dict[str, CallableDescriptor] = {}
        self._listeners: list[ChangeListener] = []

    def add_property(
        self,
        name: str,
        value_type: type,
        getter: Callable[[], Any],
        setter: Callable[[Any], None] | None = None,
        description: str = "",
    ) -> PropertyDescriptor:
        descriptor = PropertyDescriptor(
            name=name,
            description=description,
            value_type=value_type,
            getter=getter,
            setter=setter,
        )
        self._properties[name] = descriptor
        return descriptor

    def add_callable(
        self,
        name: str,
        func: Callable[..., Any],
        parameters: tuple[tuple[str, type], ...] = (),
        description: str = "",
    ) -> CallableDescriptor:
        descriptor = CallableDescriptor(
            name=name,
            description=description,
            parameters=parameters,
            func=func,
        )
        self._callables[name] = descriptor
        return descriptor

    @property
    def property_names(self) -> list[str]:
        return list(self._properties)

    @property
    def callable_names(self) -> list[str]:
        return list(self._callables)

    def descriptor(self, name: str) -> PropertyDescriptor:
        """Look up a property. Raises KeyError for unknown names."""
        try:
            return self._properties[name]
        except KeyError:
            raise KeyError(f"Unknown property: {name}") from None

    def get(self, name: str) -> Any:
        return self.descriptor(name).getter()

    def set(self, name: str, value: Any) -> None:
        """Coerce and write a property value.

        Raises:
            KeyError: Unknown property.
            ValueError: Read-only property or value of the wrong type.
        """
        descriptor = self.descriptor(name)
        if descriptor.setter is None:
            raise ValueError(f"Property {name} is read-only")
        descriptor.setter(descriptor.coerce(value))

    def call(self, name: str, *args: Any) -> Any:
        """Invoke a registered callable, coercing positional arguments."""
        try:
            descriptor = self._callables[name]
        except KeyError:
            raise KeyError(f"Unknown callable: {name}") from None
        if len(args) != len(descriptor.parameters):
            raise ValueError(
                f"{name} takes {len(descriptor.parameters)} arguments, got {len(args)}"
            )
        coerced = [
            TypeAdapter(param_type).validate_python(arg)
            for (_, param_type), arg in zip(descriptor.parameters, args)
        ]
        return descriptor.func(*coerced)

    def describe(self) -> list[dict[str, Any]]:
        """Metadata and current value of every property."""
        return [
            {
                "name": d.name,
                "description": d.description,
                "type": d.value_type.__name__,
                "read_only": d.read_only,
                "value": d.getter(),
            }
            for d in self._properties.values()
        ]

    def subscribe(self, listener: ChangeListener) -> Callable[[], None]:
        """Register a change listener. Returns a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def changed(self, name: str) -> None:
        """Notify listeners that ``name`` may have a new value."""
        change = PropertyChange(name=name, value=self.get(name))
        logger.debug("Property changed: %s = %r", change.name, change.value)
        for listener in list(self._listeners):
            listener(change)
