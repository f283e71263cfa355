"""Namespaced registry of callable functions."""

from typing import Any, Iterable, Mapping, Optional

from .adapter import CallableFunction
from .schema import parameters_to_schema

SEPARATOR = "-"


def qualified_name(namespace: str, name: str) -> str:
    return f"{namespace}{SEPARATOR}{name}"


class FunctionRegistry:
    """Hold functions grouped by namespace (one namespace per provider)."""

    def __init__(self):
        self._namespaces: dict[str, dict[str, CallableFunction]] = {}

    @property
    def namespaces(self) -> list[str]:
        return list(self._namespaces.keys())

    @property
    def function_names(self) -> list[str]:
        return [
            qualified_name(ns, name)
            for ns, functions in self._namespaces.items()
            for name in functions
        ]

    def add_functions(self, namespace: str, functions: Iterable[CallableFunction]) -> None:
        """Register a provider's functions under ``namespace``.

        Raises:
            ValueError: The namespace is already registered, it holds two
                functions with the same name, or a qualified name clashes
                with one from another namespace.
        """
        if namespace in self._namespaces:
            raise ValueError(f"Namespace '{namespace}' is already registered")

        by_name: dict[str, CallableFunction] = {}
        for fn in functions:
            if fn.name in by_name:
                raise ValueError(f"Duplicate function '{fn.name}' in namespace '{namespace}'")
            by_name[fn.name] = fn

        # "a" + "b-x" and "a-b" + "x" both qualify to "a-b-x"
        taken = set(self.function_names)
        clashes = [qualified_name(namespace, name) for name in by_name if qualified_name(namespace, name) in taken]
        if clashes:
            raise ValueError(f"Function names already registered: {clashes}")
        self._namespaces[namespace] = by_name

    def functions(self, namespace: str) -> list[CallableFunction]:
        return list(self._namespaces.get(namespace, {}).values())

    def has_function(self, name: str) -> bool:
        return self.get(name) is not None

    def get(self, name: str) -> Optional[CallableFunction]:
        """Look up a function by qualified name (``namespace-function``)."""
        # Longest namespace first so "a-b" wins over "a" for "a-b-tool"
        for namespace in sorted(self._namespaces, key=len, reverse=True):
            prefix = namespace + SEPARATOR
            if name.startswith(prefix):
                function = self._namespaces[namespace].get(name[len(prefix):])
                if function is not None:
                    return function
        return None

    async def invoke(
        self,
        name: str,
        arguments: Optional[Mapping[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> str:
        """Invoke a function by qualified name.

        Raises:
            KeyError: No such function.
        """
        function = self.get(name)
        if function is None:
            raise KeyError(f"Unknown function: {name}")
        return await function.invoke(arguments, timeout=timeout)

    def tool_definitions(self) -> list[dict]:
        """Function-calling definitions for every registered function."""
        return [
            {
                "type": "function",
                "function": {
                    "name": qualified_name(ns, fn.name),
                    "description": fn.description,
                    "parameters": parameters_to_schema(fn.parameters),
                },
            }
            for ns, functions in self._namespaces.items()
            for fn in functions.values()
        ]
