WELCOME_MESSAGE_ID = "welcome"

WELCOME_TEXT = (
    "Hello! I'm your AI assistant. I can help you with writing, analysis, "
    "problem-solving, and much more. What would you like to explore today?"
)

FRESH_GREETING_TEXT = (
    "Hi there! I'm ready for a fresh conversation. "
    "What would you like to discuss today?"
)

ASSISTANT_FAILED_TEXT = "❌ AI failed to respond"
UPLOAD_FAILED_TEXT = "❌ File upload failed. Please try again."
SIMULATED_TRANSCRIPT = "This is a simulated voice transcription."

CHAT_SYSTEM_PROMPT = (
    "You are SmartBot, a helpful AI assistant. Answer clearly and concisely."
)

STRUCTURED_SYSTEM_PROMPT = "\n".join(
    [
        "Please analyze the provided document content and produce a structured Markdown response:",
        "- Title",
        "- Summary (2-3 bullets)",
        "- Key Points (bullet list)",
        "- If relevant: Step-by-step / Procedure",
        "- Action Items (clear steps)",
        "- One-line TL;DR",
        "Strictly use only the provided document text. If not present, reply: "
        '"Answer not found in the provided document."',
    ]
)

BIG_PROMPT_TEMPLATE = STRUCTURED_SYSTEM_PROMPT

QUICK_PROMPTS = (
    "Help me write an email",
    "Explain quantum computing",
    "Create a marketing plan",
    "Debug this code issue",
    "Generate creative ideas",
    "Summarize this article",
)


def attachment_text(name: str) -> str:
    return f"📎 Attached file: {name}"


def upload_succeeded_text(name: str) -> str:
    return f'✅ File "{name}" uploaded successfully. You can now ask questions about it.'
