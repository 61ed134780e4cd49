"""Query-template binding: ``q(template, data) -> (sql, params)``."""

from sqlspine.binding.processors import Fragment, Processor, processors
from sqlspine.binding.template import CompiledQuery, bind, q

__all__ = [
    "CompiledQuery",
    "Fragment",
    "Processor",
    "bind",
    "processors",
    "q",
]
