from typing import List, Optional, Union


class FakeLLM:
    def __init__(self, responses: List[Union[str, Exception]], enabled: bool = True) -> None:
        self._responses = list(responses)
        self.enabled = enabled
        self.prompts: List[str] = []

    def generate_text(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: float = 0.4,
    ) -> str:
        self.prompts.append(prompt)
        if not self._responses:
            raise RuntimeError("FakeLLM has no more responses")
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response
