# matchvision/services/prompts.py

ANALYSIS_PROMPT = (
    "Please analyze this football match frame. Provide details on: the teams playing, "
    "current score if visible, who appears to be winning, player positions, tactics being used, "
    "and any other relevant insights about the match situation."
)

FRAME_MEDIA_TYPE = "image/jpeg"
