"""Formula expressions - parser, evaluator and whitelisted functions."""

from app.errors import EvaluationError, ExpressionError, ExpressionSyntaxError
from app.expressions.context import EvaluationContext, now_seconds
from app.expressions.evaluator import LazyNamespace, evaluate
from app.expressions.functions import FUNCTIONS, get_field
from app.expressions.nodes import Node, references
from app.expressions.parser import compile_expression, tokenize


def validate_expression(source: str) -> bool:
    """True if the text parses."""
    try:
        compile_expression(source)
        return True
    except ExpressionSyntaxError:
        return False


def evaluate_source(source: str, variables: dict) -> object:
    """Compile (memoised) and evaluate in one step."""
    return evaluate(compile_expression(source), variables)


__all__ = [
    # Errors
    "ExpressionError",
    "ExpressionSyntaxError",
    "EvaluationError",
    # Parsing
    "Node",
    "tokenize",
    "compile_expression",
    "validate_expression",
    "references",
    # Evaluation
    "evaluate",
    "evaluate_source",
    "LazyNamespace",
    "EvaluationContext",
    "now_seconds",
    "FUNCTIONS",
    "get_field",
]
