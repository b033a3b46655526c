"""Static registry of block templates that nodes are instantiated from."""
from __future__ import annotations

from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List

from cube_api.domain.entities import BlockKind, BlockTemplate, ConfigValue
from cube_api.domain.errors import UnknownTemplate


def _template(
    id: str,
    kind: BlockKind,
    category: str,
    label: str,
    description: str,
    icon: str,
    config: Dict[str, ConfigValue],
    inputs: Iterable[str] = (),
    outputs: Iterable[str] = (),
) -> BlockTemplate:
    return BlockTemplate(
        id=id,
        kind=kind,
        category=category,
        label=label,
        description=description,
        icon=icon,
        default_config=MappingProxyType(dict(config)),
        inputs=tuple(inputs),
        outputs=tuple(outputs),
    )


DEFAULT_TEMPLATES = (
    # Sensors
    _template("moisture-01", BlockKind.SENSOR, "Sensors", "Soil Moisture Sensor",
              "Measures soil moisture level", "💧",
              {"unit": "%", "interval": 5}, outputs=["value"]),
    _template("temperature-01", BlockKind.SENSOR, "Sensors", "Temperature Sensor",
              "Measures ambient temperature", "🌡️",
              {"unit": "°C", "interval": 10}, outputs=["value"]),
    _template("humidity-01", BlockKind.SENSOR, "Sensors", "Humidity Sensor",
              "Measures relative humidity", "💨",
              {"unit": "%", "interval": 10}, outputs=["value"]),
    _template("light-01", BlockKind.SENSOR, "Sensors", "Light Sensor",
              "Measures light intensity", "☀️",
              {"unit": "lux", "interval": 5}, outputs=["value"]),
    _template("motion-01", BlockKind.SENSOR, "Sensors", "Motion Sensor",
              "Detects movement in the area", "👁️",
              {"sensitivity": 5}, outputs=["detected"]),
    # Actuators
    _template("pump-01", BlockKind.ACTUATOR, "Actuators", "Water Pump",
              "Pumps water for irrigation", "🚰",
              {"duration": 5, "flowRate": 1.5}, inputs=["trigger"]),
    _template("led-01", BlockKind.ACTUATOR, "Actuators", "LED Light",
              "Turns an LED indicator on or off", "💡",
              {"color": "white", "brightness": 100}, inputs=["trigger"]),
    _template("motor-01", BlockKind.ACTUATOR, "Actuators", "Motor",
              "Drives a DC motor", "⚙️",
              {"speed": 50, "direction": "forward"}, inputs=["trigger"]),
    _template("fan-01", BlockKind.ACTUATOR, "Actuators", "Fan",
              "Circulates air for cooling", "🌀",
              {"speed": 3}, inputs=["trigger"]),
    # Logic
    _template("threshold-01", BlockKind.LOGIC, "Logic", "Threshold",
              "Compares a value against a threshold", "📏",
              {"threshold": 30, "operator": "<"},
              inputs=["value"], outputs=["above", "below"]),
    _template("timer-01", BlockKind.LOGIC, "Logic", "Timer",
              "Holds a signal for a set duration", "⏱️",
              {"duration": 5, "unit": "seconds"},
              inputs=["trigger"], outputs=["done"]),
    _template("delay-01", BlockKind.LOGIC, "Logic", "Delay",
              "Delays a signal before passing it on", "⏳",
              {"delay": 1, "unit": "seconds"},
              inputs=["trigger"], outputs=["out"]),
    _template("and-01", BlockKind.LOGIC, "Logic", "AND Gate",
              "Outputs when both inputs are active", "&",
              {}, inputs=["a", "b"], outputs=["out"]),
    _template("or-01", BlockKind.LOGIC, "Logic", "OR Gate",
              "Outputs when either input is active", "|",
              {}, inputs=["a", "b"], outputs=["out"]),
    # AI
    _template("anomaly-01", BlockKind.AI, "AI", "Anomaly Detector",
              "Flags readings that deviate from the learned baseline", "🧠",
              {"sensitivity": 0.8, "window": 30},
              inputs=["value"], outputs=["anomaly"]),
    _template("predict-01", BlockKind.AI, "AI", "Predictor",
              "Forecasts the next sensor reading", "🔮",
              {"horizon": 10, "model": "linear"},
              inputs=["value"], outputs=["forecast"]),
)


class BlockCatalog:
    """Immutable, id-indexed collection of block templates."""

    def __init__(self, templates: Iterable[BlockTemplate] = DEFAULT_TEMPLATES) -> None:
        self._templates: Dict[str, BlockTemplate] = {}
        for template in templates:
            if template.id in self._templates:
                raise ValueError(f"Duplicate block template id: {template.id}")
            self._templates[template.id] = template

    def get(self, template_id: str) -> BlockTemplate:
        """Return the template or raise UnknownTemplate."""
        try:
            return self._templates[template_id]
        except KeyError:
            raise UnknownTemplate(template_id) from None

    def all(self) -> List[BlockTemplate]:
        return list(self._templates.values())

    def by_category(self) -> Dict[str, List[BlockTemplate]]:
        """Group templates by category, keeping catalog order."""
        groups: Dict[str, List[BlockTemplate]] = {}
        for template in self._templates.values():
            groups.setdefault(template.category, []).append(template)
        return groups

    def __contains__(self, template_id: object) -> bool:
        return template_id in self._templates

    def __iter__(self) -> Iterator[BlockTemplate]:
        return iter(self._templates.values())

    def __len__(self) -> int:
        return len(self._templates)
