from dataclasses import dataclass

QUERY_PREFIX = "Query: "


@dataclass(frozen=True)
class EmbeddingPromptTemplate:
    """Wraps a search query for instruction-tuned embedders.

    Only search queries go through this; stored entity text is embedded raw.
    """

    instruction_prefix: str | None = None
    query_prefix: str | None = QUERY_PREFIX

    def apply(self, query: str) -> str:
        if self.instruction_prefix and self.query_prefix:
            return f"{self.instruction_prefix}\n{self.query_prefix}{query}"
        if self.instruction_prefix:
            return f"{self.instruction_prefix}\n{query}"
        if self.query_prefix:
            return f"{self.query_prefix}{query}"
        return query


def instruction(kind: str) -> str:
    return f"Instruction: Given a user query, find {kind}"


NOTES = EmbeddingPromptTemplate(instruction("notes stored with content that the user mentions"))
TODOS = EmbeddingPromptTemplate(instruction("todo items stored with details that the user mentions"))
CONTACTS = EmbeddingPromptTemplate(instruction("contacts stored with details that the user mentions"))
EVENTS = EmbeddingPromptTemplate(instruction("events stored with details that the user mentions"))
PLACES = EmbeddingPromptTemplate(instruction("places stored with details that the user mentions"))
RECIPES = EmbeddingPromptTemplate(instruction("recipes stored with details that the user mentions"))
TAGS = EmbeddingPromptTemplate(instruction("tags similar to the one the user mentions"))
BANK_ACCOUNTS = EmbeddingPromptTemplate(instruction("bank accounts stored with details that the user mentions"))
TRANSACTIONS = EmbeddingPromptTemplate(instruction("transactions stored with details that the user mentions"))
