from __future__ import annotations

SYSTEM_PROMPT = (
    "You are an expert at analyzing conversations from screenshots or text in any language. "
    "Your task is to:\n"
    "1. Identify who was wrong in the conversation\n"
    "2. Identify who gave unsolicited advice\n"
    "3. Identify who was being rude\n\n"
    "Analyze the conversation carefully and extract all the messages, regardless of the "
    "language used (English, Spanish, French, German, Chinese, Japanese, Arabic, Russian, "
    "Portuguese, Italian, Korean, Hindi, or any other language). Identify each participant "
    "by their name or username. Be fair and objective in your analysis. Understand cultural "
    "context and language nuances when determining if someone was wrong, gave unsolicited "
    "advice, or was being rude."
)

_TASK_LINES = (
    "Analyze this conversation (which may be in any language). Identify:\n"
    "1. Who was wrong (if anyone)\n"
    "2. Who gave unsolicited advice (if anyone)\n"
    "3. Who was being rude (if anyone)\n\n"
)

_SUMMARY_LANGUAGE = (
    "The summary should be in the same language as the conversation, "
    "or in English if the conversation uses multiple languages."
)

STRUCTURED_PROMPT = (
    f"{_TASK_LINES}"
    "Provide a structured analysis with the names/usernames of people in each category. "
    "If no one fits a category, return an empty array for that category. "
    f"{_SUMMARY_LANGUAGE}"
)

FREEFORM_PROMPT = (
    f"{_TASK_LINES}"
    "Respond with a valid JSON object in this exact format:\n"
    "{\n"
    '  "wrong": ["name1", "name2"],\n'
    '  "unsolicitedAdvice": ["name3"],\n'
    '  "rude": ["name4"],\n'
    '  "summary": "Brief summary of the conversation analysis"\n'
    "}\n\n"
    "If no one fits a category, use an empty array []. "
    f"{_SUMMARY_LANGUAGE}"
)

SCREENSHOT_PREFIX = "Analyze this screenshot of a conversation. "
CONVERSATION_TEXT_HEADER = "Conversation text:"
