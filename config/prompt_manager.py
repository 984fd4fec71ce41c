"""Prompt management for system messages"""

from pathlib import Path
from typing import Optional


TASK_INSTRUCTIONS = {
    "DASHBOARD": """Build an analysis dashboard for the request below.

Respond with a single JSON object of the form {"charts": [...]} and nothing else.
Each chart object has these fields:
- "chartType": one of "bar", "line", "pie", "scatter"
- "title": short chart title
- "data": array of row objects computed from the dataset
- "xAxisKey": field used for the x axis (bar, line, scatter)
- "yAxisKey": field used for the y axis (scatter only)
- "dataKeys": array of numeric fields plotted as series (bar, line)
- "colors": array of hex colors, one per series or pie slice
- "pieDataKey" / "pieNameKey": value and label fields (pie only)

Return between 2 and 6 charts. Aggregate the data yourself; never return more than 50 rows per chart.""",

    "EDA": """Perform an exploratory data analysis for the request below.
Describe the structure of the dataset, data types, missing values, distributions,
outliers and notable correlations. Use markdown headings and bullet points.""",

    "INSIGHTS": """Answer the request below using the dataset.
Highlight the most important findings and trends, quote concrete numbers,
and suggest next steps when appropriate. Use markdown formatting.""",
}


class PromptManager:
    """Manage system prompts for the chat application"""

    def __init__(self, prompt_dir: Path = Path("config/prompts")):
        self.prompt_dir = prompt_dir
        self.custom_prompt_path = self.prompt_dir / "custom.txt"

    def get_default_prompt_template(self) -> str:
        """Get the default system prompt template"""
        return """You are an expert data analyst. The user has uploaded a dataset and will ask
questions about it. Base every answer strictly on the data below; if the data cannot
answer a question, say so.

{dataset_info}

## Communication style:
- Be clear and concise
- Explain your reasoning
- Highlight important findings
- Suggest next steps when appropriate"""

    def load_prompt(self, use_custom: bool = False) -> str:
        """Load prompt from file"""
        if not use_custom:
            return self.get_default_prompt_template()

        try:
            return self.custom_prompt_path.read_text()
        except FileNotFoundError:
            # Fallback to default template
            return self.get_default_prompt_template()

    def get_formatted_prompt(
        self,
        raw_data: str,
        use_custom: bool = False,
        max_chars: Optional[int] = None
    ) -> str:
        """Get system prompt with the dataset embedded"""
        base_prompt = self.load_prompt(use_custom)

        data = raw_data
        truncated = False
        if max_chars is not None and len(data) > max_chars:
            data = data[:max_chars]
            truncated = True

        dataset_section = f"## Dataset:\n```\n{data}\n```"
        if truncated:
            dataset_section += f"\n(The dataset was truncated to its first {max_chars} characters.)"

        return base_prompt.replace("{dataset_info}", dataset_section)

    def get_task_prompt(self, task, query: str) -> str:
        """Wrap a user query with the instructions for its task"""
        return f"{TASK_INSTRUCTIONS[task.name]}\n\nRequest: {query}"


# Global instance
_prompt_manager: Optional[PromptManager] = None


def get_prompt_manager() -> PromptManager:
    """Get or create the global prompt manager instance"""
    global _prompt_manager

    if _prompt_manager is None:
        from .settings import get_settings
        settings = get_settings()
        _prompt_manager = PromptManager(settings.prompt_dir)

    return _prompt_manager
