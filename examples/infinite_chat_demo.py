"""Minimal demonstration: one chat turn through the Supermemory proxy."""

from infinite_chat.api.service import handle_chat

if __name__ == "__main__":
    history = [
        {"role": "system", "content": "You are a concise crypto research assistant."},
        {"role": "user", "content": "I mostly care about on-chain metrics, not price action. What should I watch this week?"},
    ]
    result = handle_chat(history, conversation_id="demo-conversation", user_id="demo-user")
    print("Strategy:", result["strategy"])
    print("Agent:", result["reply"])
