from __future__ import annotations

import logging
from importlib.metadata import PackageNotFoundError, version
from textwrap import indent

from jinja2 import Environment, StrictUndefined, Template

from diforge.synthesis.planner import RedirectedMethodPlan, SubclassGenerationPlan
from diforge.synthesis.templates import (
    CLASS_TEMPLATE,
    IMPORTS_TEMPLATE,
    MODULE_TEMPLATE,
    OVERLOADED_METHOD_TEMPLATE,
    REDIRECT_METHOD_TEMPLATE,
)

_INDENT = " " * 4
_GENERATOR_SOURCE = "diforge.synthesis.renderer.SubclassTemplateRenderer.get_subclass_code"
logger = logging.getLogger(__name__)


class SubclassTemplateRenderer:
    """Renderer for generated subclass code."""

    def __init__(self) -> None:
        self._env = Environment(
            autoescape=False,  # noqa: S701
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=StrictUndefined,
        )
        self._module_template = self._template(MODULE_TEMPLATE)
        self._imports_template = self._template(IMPORTS_TEMPLATE)
        self._class_template = self._template(CLASS_TEMPLATE)
        self._redirect_method_template = self._template(REDIRECT_METHOD_TEMPLATE)
        self._overloaded_method_template = self._template(OVERLOADED_METHOD_TEMPLATE)

    def get_subclass_code(self, *, plan: SubclassGenerationPlan) -> str:
        """Render the module source defining the synthesized subclass.

        Args:
            plan: Generation plan produced by ``SubclassPlanner``.

        """
        self._log_plan_strategy(plan=plan)
        return self._module_template.render(
            module_docstring_block=self._render_module_docstring(plan=plan),
            imports_block=self._imports_template.render(),
            class_block=self._render_class(plan=plan),
        )

    def _log_plan_strategy(self, *, plan: SubclassGenerationPlan) -> None:
        logger.info(
            (
                "Subclass synthesis strategy: target=%s class=%s "
                "redirects={lookup:%d,replace:%d} passthrough_count=%d generated_methods=%d"
            ),
            self._format_symbol(plan.target_type),
            plan.class_name,
            plan.lookup_count,
            plan.replace_count,
            plan.passthrough_count,
            len(plan.methods),
        )

    def _render_module_docstring(self, *, plan: SubclassGenerationPlan) -> str:
        lines = [
            "Generated diforge subclass module.",
            "",
            f"Generated by: {_GENERATOR_SOURCE}",
            f"diforge version used for generation: {self._resolve_diforge_version()}",
            "",
            "Generation configuration:",
            f"- target type: {self._format_symbol(plan.target_type)}",
            f"- lookup redirects: {plan.lookup_count}",
            f"- replace redirects: {plan.replace_count}",
            f"- passthrough methods: {plan.passthrough_count}",
        ]
        return self._join_lines(self._docstring_lines(lines))

    def _render_class(self, *, plan: SubclassGenerationPlan) -> str:
        method_blocks = [self._render_method(plan=plan, method=method) for method in plan.methods]
        slot_names = f'"{plan.table_attr}", "{plan.resolver_attr}"'
        return self._class_template.render(
            class_name=plan.class_name,
            base_binding=plan.base_binding,
            class_docstring_block=self._render_class_docstring(plan=plan),
            slot_names=slot_names,
            methods_block=self._indent_block("\n\n".join(method_blocks)),
        )

    def _render_class_docstring(self, *, plan: SubclassGenerationPlan) -> str:
        lines = [f"Synthesized subclass of {self._format_symbol(plan.target_type)}.", ""]
        lines.append("Redirected signatures:")
        lines.extend(
            f"- {signature}" for method in plan.methods for signature in method.signatures
        )
        return self._join_lines(self._indent_lines(self._docstring_lines(lines), 1))

    def _render_method(self, *, plan: SubclassGenerationPlan, method: RedirectedMethodPlan) -> str:
        if method.is_overloaded:
            return self._overloaded_method_template.render(
                method_name=method.method_name,
                overloads_binding=method.binding_name,
                table_attr=plan.table_attr,
                resolver_attr=plan.resolver_attr,
            )
        return self._redirect_method_template.render(
            method_name=method.method_name,
            method_binding=method.binding_name,
            table_attr=plan.table_attr,
            resolver_attr=plan.resolver_attr,
        )

    def _resolve_diforge_version(self) -> str:
        try:
            return version("diforge")
        except PackageNotFoundError:
            return "unknown"

    def _format_symbol(self, value: type) -> str:
        if value.__module__ == "builtins":
            return value.__qualname__
        return f"{value.__module__}.{value.__qualname__}"

    def _docstring_lines(self, lines: list[str]) -> list[str]:
        escaped = [line.replace("\\", "\\\\").replace('"""', '\\"\\"\\"') for line in lines]
        return ['"""', *escaped, '"""']

    def _template(self, text: str) -> Template:
        return self._env.from_string(text)

    def _indent_block(self, block: str) -> str:
        return indent(block, _INDENT)

    def _indent_lines(self, lines: list[str], depth: int) -> list[str]:
        prefix = _INDENT * depth
        return [f"{prefix}{line}" if line else "" for line in lines]

    def _join_lines(self, lines: list[str]) -> str:
        return "\n".join(lines)
