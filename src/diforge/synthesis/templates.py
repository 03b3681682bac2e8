from textwrap import dedent

MODULE_TEMPLATE = dedent(
    """
    {{ module_docstring_block }}

    {{ imports_block }}


    {{ class_block }}
    """,
).strip()

IMPORTS_TEMPLATE = dedent(
    """
    from __future__ import annotations

    from typing import Any

    from diforge.constructors import allocate_instance
    from diforge.interceptors import MethodCall
    """,
).strip()

CLASS_TEMPLATE = dedent(
    """
    class {{ class_name }}({{ base_binding }}):
    {% if class_docstring_block %}
    {{ class_docstring_block }}

    {% endif %}
        __slots__ = ({{ slot_names }})

        def __new__(cls, /, *args: Any, **kwargs: Any) -> Any:
            return allocate_instance(super(), cls, args, kwargs)

    {{ methods_block }}
    """,
).strip()

REDIRECT_METHOD_TEMPLATE = dedent(
    """
    def {{ method_name }}(self, /, *args: Any, **kwargs: Any) -> Any:
        return self.{{ table_attr }}[{{ method_binding }}.signature].invoke(
            MethodCall(
                receiver=self,
                method={{ method_binding }},
                args=args,
                kwargs=kwargs,
                resolver=self.{{ resolver_attr }},
            ),
        )
    """,
).strip()

OVERLOADED_METHOD_TEMPLATE = dedent(
    """
    def {{ method_name }}(self, /, *args: Any, **kwargs: Any) -> Any:
        method = {{ overloads_binding }}.select(args)
        entry = self.{{ table_attr }}[method.signature]
        if entry.is_passthrough:
            return super().{{ method_name }}(*args, **kwargs)
        return entry.invoke(
            MethodCall(
                receiver=self,
                method=method,
                args=args,
                kwargs=kwargs,
                resolver=self.{{ resolver_attr }},
            ),
        )
    """,
).strip()
