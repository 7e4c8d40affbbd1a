"""
Calculator Plugin - Inline math evaluation.

Triggers on the "calc" keyword. Uses simpleeval for safe expression
evaluation (no access to builtins, filesystem, or imports).

Usage: calc 2 + 2, calc sqrt(16), calc pi * 2
"""

import html
import math

from loguru import logger
from simpleeval import InvalidExpression, simple_eval

from dext.plugins.base import Plugin
from dext.search.router import ResultItem

FUNCTIONS = {
    "sqrt": math.sqrt,
    "abs": abs,
    "round": round,
    "sin": math.sin,
    "cos": math.cos,
    "tan": math.tan,
    "log": math.log,
    "log10": math.log10,
    "pow": pow,
    "min": min,
    "max": max,
}

NAMES = {
    "pi": math.pi,
    "e": math.e,
}


def evaluate(expr: str):
    """Evaluate an expression and format integral floats without '.0'."""
    result = simple_eval(expr, functions=FUNCTIONS, names=NAMES)
    if isinstance(result, float) and result.is_integer():
        return str(int(result))
    return str(result)


class CalculatorPlugin(Plugin):
    """Evaluate math expressions typed after 'calc'."""

    name = "Calculator"
    keyword = "calc"
    action = "copy"

    def helper(self, keyword: str) -> list[ResultItem]:
        return [ResultItem(
            title="Type an expression",
            subtitle=f"e.g. {keyword} 2 + 2, {keyword} sqrt(16), {keyword} pi * 2",
            icon="accessories-calculator",
        )]

    def query(self, args: list[str]) -> list[ResultItem]:
        expr = " ".join(args).strip()
        if not expr:
            return self.helper(self.keyword)

        try:
            display = evaluate(expr)
        except InvalidExpression:
            return [ResultItem(
                title="Invalid expression",
                subtitle=f"Could not evaluate: {expr[:60]}",
                icon="dialog-error",
            )]
        except (TypeError, ValueError, ZeroDivisionError, OverflowError) as e:
            return [ResultItem(
                title="Math error",
                subtitle=str(e)[:80],
                icon="dialog-error",
            )]
        except Exception as e:
            logger.warning(f"Unexpected calculator error for '{expr}': {e}")
            return [ResultItem(
                title="Error",
                subtitle=str(e)[:80],
                icon="dialog-error",
            )]

        return [ResultItem(
            title=display,
            subtitle=f"= {expr}",
            arg=display,
            icon="accessories-calculator",
            text={"copy": display},
            extra={"expression": expr},
        )]

    def details(self, item: ResultItem) -> str:
        expr = item.extra.get("expression")
        if not expr:
            return ""
        return (
            f"<p><code>{html.escape(expr)}</code></p>"
            f"<h2>{html.escape(item.title)}</h2>"
        )


PLUGIN_CLASS = CalculatorPlugin
