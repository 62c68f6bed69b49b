"""
Runtime values and environments for the nad interpreter.

Classes:
    Environment: A scope frame mapping names to values, linked to its enclosing frame.
    NadCallable (Protocol): Anything that can be called from nad code.
    NativeFunction: A callable implemented in Python (e.g. `clock`).
    NadFunction: A user-defined function or method paired with its closure.
    NadClass: A class; calling it constructs a NadInstance.
    NadInstance: An object with per-instance fields and a reference to its class.

Value mapping:
    nil -> None, booleans -> bool, numbers -> float, strings -> str; every other
    value is one of the classes above. Environments, closures, classes and
    instances may form cycles; they are left to Python's garbage collector.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Protocol

from nad.nad_ast import FuncDecl, Function
from nad.nad_errors import NadRuntimeError, ReturnControlFlow
from nad.nad_lexer import Token

if TYPE_CHECKING:
    from nad.nad_interpreter import Interpreter


class Environment:
    """A single scope in the chain of lexical environments.

    Attributes:
        values (dict[str, Any]): Bindings owned by this scope.
        enclosing (Environment | None): The next scope outward; None for globals.
    """

    def __init__(self, enclosing: Environment | None = None) -> None:
        self.values: dict[str, Any] = {}
        self.enclosing = enclosing

    def define(self, name: Token, value: Any) -> None:
        """Creates a new binding; a name may be bound only once per scope."""
        if name.lexeme in self.values:
            raise NadRuntimeError(
                name, f'Redeclare existing variable: "{name.lexeme}".'
            )
        self.values[name.lexeme] = value

    def bind(self, name: str, value: Any) -> None:
        """Binds an implicit name such as `this` or `super`, or a native."""
        self.values[name] = value

    def get(self, name: Token) -> Any:
        env: Environment | None = self
        while env is not None:
            if name.lexeme in env.values:
                return env.values[name.lexeme]
            env = env.enclosing
        raise NadRuntimeError(name, "Dereference an undefined variable.")

    def assign(self, name: Token, value: Any) -> None:
        env: Environment | None = self
        while env is not None:
            if name.lexeme in env.values:
                env.values[name.lexeme] = value
                return
            env = env.enclosing
        raise NadRuntimeError(name, "Assign value to an undefined variable.")

    def ancestor(self, distance: int) -> Environment:
        env = self
        for _ in range(distance):
            if env.enclosing is None:
                raise LookupError(f"Scope depth {distance} exceeds the environment chain.")
            env = env.enclosing
        return env

    def get_at(self, distance: int, name: str) -> Any:
        return self.ancestor(distance).values[name]

    def assign_at(self, distance: int, name: Token, value: Any) -> None:
        self.ancestor(distance).values[name.lexeme] = value


class NadCallable(Protocol):
    """Protocol for every value that may appear before `(`."""

    def arity(self) -> int: ...  # pragma: no cover

    def call(self, interpreter: Interpreter, arguments: list[Any]) -> Any: ...  # pragma: no cover


class NativeFunction:
    """A function implemented in Python and exposed as a global."""

    def __init__(
        self,
        name: str,
        arity: int,
        invoker: Callable[[Interpreter, list[Any]], Any],
    ) -> None:
        self.name = name
        self._arity = arity
        self.invoker = invoker

    def arity(self) -> int:
        return self._arity

    def call(self, interpreter: Interpreter, arguments: list[Any]) -> Any:
        return self.invoker(interpreter, arguments)

    def __str__(self) -> str:
        return "<native fn>"


class NadFunction:
    """A user function: its declaration plus the environment it closes over.

    Attributes:
        declaration (FuncDecl | Function): Named declaration or anonymous literal.
        closure (Environment): The environment active when the function was created.
        is_init (bool): True for a class's `init` method; calls return the receiver.
    """

    def __init__(
        self,
        declaration: FuncDecl | Function,
        closure: Environment,
        is_init: bool = False,
    ) -> None:
        self.declaration = declaration
        self.closure = closure
        self.is_init = is_init

    @property
    def name(self) -> str | None:
        if isinstance(self.declaration, FuncDecl):
            return self.declaration.name.lexeme
        return None

    def arity(self) -> int:
        return len(self.declaration.params)

    def call(self, interpreter: Interpreter, arguments: list[Any]) -> Any:
        frame = Environment(self.closure)
        for param, value in zip(self.declaration.params, arguments):
            frame.define(param, value)

        result = None
        try:
            interpreter.execute_block(self.declaration.body, frame)
        except ReturnControlFlow as ret:
            result = ret.value

        if self.is_init:
            return self.closure.get_at(0, "this")
        return result

    def bind(self, instance: NadInstance) -> NadFunction:
        """Returns a copy of this method whose closure binds `this` to `instance`."""
        env = Environment(self.closure)
        env.bind("this", instance)
        return NadFunction(self.declaration, env, self.is_init)

    def __str__(self) -> str:
        if self.name is None:
            return "<anonymous function>"
        return f"<function {self.name}>"


class NadClass:
    """A class value; calling it allocates an instance and runs `init`."""

    def __init__(
        self,
        name: str,
        methods: dict[str, NadFunction],
        superclass: NadClass | None = None,
    ) -> None:
        self.name = name
        self.methods = methods
        self.superclass = superclass

    def find_method(self, name: str) -> NadFunction | None:
        klass: NadClass | None = self
        while klass is not None:
            if name in klass.methods:
                return klass.methods[name]
            klass = klass.superclass
        return None

    def arity(self) -> int:
        initializer = self.find_method("init")
        return 0 if initializer is None else initializer.arity()

    def call(self, interpreter: Interpreter, arguments: list[Any]) -> Any:
        instance = NadInstance(self)
        initializer = self.find_method("init")
        if initializer is not None:
            initializer.bind(instance).call(interpreter, arguments)
        return instance

    def __str__(self) -> str:
        return f"<class '{self.name}'>"


class NadInstance:
    """An object: a mutable bag of fields plus its class."""

    def __init__(self, klass: NadClass) -> None:
        self.klass = klass
        self.fields: dict[str, Any] = {}

    def get(self, name: Token) -> Any:
        if name.lexeme in self.fields:
            return self.fields[name.lexeme]

        method = self.klass.find_method(name.lexeme)
        if method is not None:
            return method.bind(self)

        raise NadRuntimeError(name, f"property '{name.lexeme}' does not exist.")

    def set(self, name: Token, value: Any) -> None:
        self.fields[name.lexeme] = value

    def __str__(self) -> str:
        return f"<instance of '{self.klass.name}'>"


def is_callable(value: Any) -> bool:
    return isinstance(value, (NadFunction, NativeFunction, NadClass))


def is_truthy(value: Any) -> bool:
    """nil and false are false; every other value is true."""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    return True


def is_equal(left: Any, right: Any) -> bool:
    """Structural equality for nil/bool/number/string, identity otherwise."""
    if left is None or right is None:
        return left is right
    if isinstance(left, (bool, float, str)) or isinstance(right, (bool, float, str)):
        return type(left) is type(right) and left == right
    return left is right


def stringify(value: Any) -> str:
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if value.is_integer() and abs(value) < 1e16:
            return str(int(value))
        return repr(value)
    return str(value)


__all__ = [
    "Environment",
    "NadCallable",
    "NadClass",
    "NadFunction",
    "NadInstance",
    "NativeFunction",
    "is_callable",
    "is_equal",
    "is_truthy",
    "stringify",
]
