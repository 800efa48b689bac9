"""
Strategy Registry
=================

Registry for discovering and constructing pluggable implementations by name.

One registry exists per role (post processors, id strategies, write-model
strategies, CDC handlers). Each is created once at import time by the module
that defines the role's base class, and implementations register themselves
with a decorator.
"""

import inspect
import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional, Type

from sink.core.exceptions import ConfigurationError, ContractViolationError, SinkError

logger = logging.getLogger(__name__)

# Type alias for an implementation factory (a class or a plain function)
Factory = Callable[..., Any]


@dataclass(frozen=True)
class StrategyHandle:
    """
    A name resolved to its factory, ready to be constructed.

    ``create`` enforces the capability contract: the factory must accept the
    contract's arguments and must produce an instance of the role's base class.
    """
    name: str
    factory: Factory
    base: Type
    role: str

    def create(self, *args: Any) -> Any:
        """
        Construct the implementation.

        Args:
            *args: Contract arguments, e.g. ``()`` or ``(projector,)``.

        Returns:
            Instance of the role's base class.

        Raises:
            ContractViolationError: If the factory cannot be called with the
                contract's arguments, is an abstract class, or returns
                something that is not a ``base`` instance.
            ConfigurationError: If the factory fails while constructing.
        """
        try:
            signature = inspect.signature(self.factory)
        except ValueError:
            # builtins without introspectable signatures are checked by the call itself
            signature = None

        try:
            if signature is not None:
                signature.bind(*args)
        except TypeError as e:
            raise ContractViolationError(
                f"Error: {self.role} '{self.name}' violates the contract since it "
                f"cannot be constructed from {len(args)} argument(s): {e}",
                value=self.name,
            ) from e

        if inspect.isclass(self.factory) and inspect.isabstract(self.factory):
            missing = ", ".join(sorted(self.factory.__abstractmethods__))
            raise ContractViolationError(
                f"Error: {self.role} '{self.name}' violates the contract since it "
                f"doesn't implement {missing}",
                value=self.name,
            )

        try:
            instance = self.factory(*args)
        except SinkError:
            raise
        except Exception as e:
            raise ConfigurationError(
                f"Error: {self.role} '{self.name}' failed to construct: {type(e).__name__}: {e}",
                value=self.name,
            ) from e

        if not isinstance(instance, self.base):
            raise ContractViolationError(
                f"Error: {self.role} '{self.name}' violates the contract since it "
                f"doesn't implement {self.base.__name__}",
                value=self.name,
            )
        return instance


class StrategyRegistry:
    """
    Registry for one role's implementations.

    Supports both class-based and factory-based registration.

    Example:
        registry = StrategyRegistry("id strategy", IdStrategy)

        # Register by class
        registry.register("uuid", UuidStrategy)

        # Register by factory
        @registry.register_factory("custom")
        def create_custom() -> IdStrategy:
            return CustomStrategy()

        # Resolve against an allow-list and construct
        strategy = registry.resolve("uuid", PREDEFINED, custom_names).create()
    """

    def __init__(self, role: str, base: Type):
        """
        Initialize empty registry.

        Args:
            role: Human readable role name used in error messages.
            base: Base class every constructed implementation must subclass.
        """
        self.role = role
        self.base = base
        self._classes: dict[str, Type] = {}
        self._factories: dict[str, Factory] = {}

    # =========================================================================
    # Registration
    # =========================================================================

    def register(self, name: str, implementation: Type) -> None:
        """
        Register an implementation class.

        Raises:
            ValueError: If name is already registered.
        """
        if self.has(name):
            raise ValueError(f"{self.role.capitalize()} '{name}' is already registered")

        self._classes[name] = implementation
        logger.debug(f"Registered {self.role}: {name}")

    def register_factory(self, name: str) -> Callable[[Factory], Factory]:
        """
        Decorator to register a factory function.

        Example:
            @registry.register_factory("my_strategy")
            def create_my_strategy():
                return MyStrategy()
        """
        def decorator(factory: Factory) -> Factory:
            if self.has(name):
                raise ValueError(f"{self.role.capitalize()} '{name}' is already registered")
            self._factories[name] = factory
            logger.debug(f"Registered {self.role} factory: {name}")
            return factory
        return decorator

    def unregister(self, name: str) -> None:
        self._classes.pop(name, None)
        self._factories.pop(name, None)

    # =========================================================================
    # Discovery
    # =========================================================================

    def names(self) -> list[str]:
        """Sorted names of all registered implementations."""
        return sorted(set(self._classes) | set(self._factories))

    def has(self, name: str) -> bool:
        return name in self._classes or name in self._factories

    def get_class(self, name: str) -> Optional[Type]:
        """Registered class, or None if the name is factory-registered or unknown."""
        return self._classes.get(name)

    # =========================================================================
    # Resolution
    # =========================================================================

    def resolve(
        self,
        name: str,
        predefined: Optional[Iterable[str]] = None,
        declared_custom: Iterable[str] = (),
    ) -> StrategyHandle:
        """
        Resolve a configured name to a constructible handle.

        Args:
            name: Configured implementation name.
            predefined: Allow-list of built-in names. None skips the
                allow-list check (the registry itself is the allow-list).
            declared_custom: Additional names declared in configuration.

        Returns:
            StrategyHandle for the name.

        Raises:
            ConfigurationError: If the name is not allowed, or allowed but
                nothing is registered under it.
        """
        if predefined is not None:
            allowed = set(predefined) | set(declared_custom)
            if name not in allowed:
                raise ConfigurationError(f"Error: unknown {self.role} {name}", value=name)

        if name in self._classes:
            factory = self._classes[name]
        elif name in self._factories:
            factory = self._factories[name]
        else:
            raise ConfigurationError(
                f"Error: {self.role} '{name}' is not registered. "
                f"Available: {self.names()}",
                value=name,
            )

        return StrategyHandle(name=name, factory=factory, base=self.base, role=self.role)

    def create(self, name: str, *args: Any) -> Any:
        """Resolve without an allow-list and construct in one step."""
        return self.resolve(name).create(*args)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(role='{self.role}', names={self.names()})"
