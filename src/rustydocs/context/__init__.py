"""Retrieval context expansion and question answering."""

from rustydocs.context.expander import ask_the_model, code_element_from_payload, expand_context

__all__ = ["ask_the_model", "code_element_from_payload", "expand_context"]
