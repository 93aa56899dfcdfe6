"""Prompt template for turning free text into task fields"""
from langchain_core.prompts import ChatPromptTemplate


prompt_template = ChatPromptTemplate.from_messages([
    (
        "system",
        """You help a person plan their day by filling in the fields of a new task.

=== RULES ===
- Keep the description short and in the user's language.
- Only pick a category or section from the lists below. Use null when nothing fits.
- Only set a due date when the text states or clearly implies one. Today is {today}.
- Priority is "none" unless the text signals urgency or importance.
- Put a URL found in the text into link and remove it from the description.

=== EXISTING CATEGORIES ===
{categories}

=== EXISTING SECTIONS ===
{sections}
""",
    ),
    ("human", "{text}"),
])
