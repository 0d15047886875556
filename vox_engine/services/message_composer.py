"""
Message composition for text generation.

Builds the exact message list sent to the LLM: the persona system prompt,
then every prior turn as a user/assistant pair in dialogue order, then the
new user input.
"""

from typing import Dict, List, Sequence


class MessageComposer:
    """Turns persona + history + new input into chat messages."""

    def compose(self, system_prompt: str, history: Sequence, new_input: str) -> List[Dict[str, str]]:
        """
        Compose the chat message list.

        Args:
            system_prompt: Character persona instruction
            history: Prior turns, oldest first (anything with user_message/ai_message)
            new_input: The user's new message

        Returns:
            List of {"role", "content"} dicts of length 2 * len(history) + 2
        """
        messages = [{"role": "system", "content": system_prompt}]
        for turn in history:
            messages.append({"role": "user", "content": turn.user_message})
            messages.append({"role": "assistant", "content": turn.ai_message})
        messages.append({"role": "user", "content": new_input})
        return messages
