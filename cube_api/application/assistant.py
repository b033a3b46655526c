"""Keyword-matching assistant for sketch building help."""
from __future__ import annotations

GREETING = (
    "Hi! I'm your AI assistant. I can help you create sketches from text descriptions "
    "or debug your IoT workflows. Try asking me to create a sketch like "
    "'If soil moisture is below 30%, turn on the pump for 5 seconds'."
)

SKETCH_REPLY = (
    "I'll help you create a sketch! Based on your description, I can generate the "
    "appropriate blocks and connections. Would you like me to create a moisture "
    "monitoring system with automatic pump control?"
)

DEBUG_REPLY = (
    "I can help debug your workflow! Common issues include incorrect threshold values, "
    "missing connections between blocks, or logic flow problems. Can you describe "
    "what's not working as expected?"
)

MOISTURE_PUMP_REPLY = (
    "Perfect! For a moisture-controlled pump system, you'll need: 1) Moisture Sensor "
    "block, 2) Threshold logic block (set to your desired moisture level), 3) Timer "
    "block (for pump duration), and 4) Pump actuator block. Connect them in sequence: "
    "sensor → threshold → timer → pump."
)

TEMPERATURE_FAN_REPLY = (
    "For temperature control with a fan, you'll need: 1) Temperature Sensor, "
    "2) Threshold block (set to your target temperature), 3) Fan actuator. Connect: "
    "sensor → threshold → fan. You can also add a timer to prevent rapid on/off cycling."
)

FALLBACK_REPLY = (
    "I understand you're working on an IoT workflow. I can help you create sketches "
    "from text descriptions, debug existing workflows, or suggest improvements. "
    "What specific help do you need?"
)


def respond(user_text: str) -> str:
    """Pick a canned reply by keyword; earlier rules win."""
    text = user_text.lower()

    if "sketch" in text or "create" in text or "workflow" in text:
        return SKETCH_REPLY
    if "debug" in text or "problem" in text or "error" in text:
        return DEBUG_REPLY
    if "moisture" in text and "pump" in text:
        return MOISTURE_PUMP_REPLY
    if "temperature" in text or "fan" in text:
        return TEMPERATURE_FAN_REPLY
    return FALLBACK_REPLY
