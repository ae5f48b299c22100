"""TypeScript to JavaScript conversion."""
from .lexer import Token, TokenList, tokenize
from .transpiler import transpile

__all__ = [
    "Token",
    "TokenList",
    "tokenize",
    "transpile",
]
