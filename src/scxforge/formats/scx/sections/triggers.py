"""
TRIGGERS section - scripted events.

    f64 trigger system version
    u32 n, n triggers, i32 display order x n

Each trigger:
    u32 enabled, u8 looping, u8 is objective, i32 objective order,
    [u32 start time]          before version 1.8
    u32-str description, u32-str name,
    [u32-str short description]  from version 1.8
    i32 n effects, effects, i32 order x n
    i32 n conditions, conditions, i32 order x n

Triggers, effects and conditions are stored in creation order followed by a
permutation giving the order they are shown in. Decoding applies the
permutation; encoding writes the lists as displayed with an identity order.
"""

import logging
from typing import TYPE_CHECKING, List

from ....errors import ValueOutOfRange
from ..edition import CapabilityTable
from ..model import Trigger, TriggerCondition, TriggerEffect
from .base import SectionCodec, register_section

if TYPE_CHECKING:
    from ..model import Scenario
    from ....utils.binary import IoBuffer

logger = logging.getLogger(__name__)

# Trigger system version that replaced start times with short descriptions.
SHORT_DESCRIPTION_VERSION = 1.8


@register_section("triggers")
class TriggersCodec(SectionCodec):

    def read(self, io: 'IoBuffer', scenario: 'Scenario', caps: CapabilityTable):
        if not caps.supports_triggers:
            scenario.triggers = []
            return

        version = io.read_double("version")
        if version != caps.trigger_version:
            raise ValueOutOfRange(version, f"{scenario.edition} uses trigger version {caps.trigger_version}",
                                  section=self.name, field="version")
        count = io.read_uint32("count")
        triggers = [self._read_trigger(io, version, i) for i in range(count)]
        scenario.triggers = self._read_order(io, triggers, "order")
        logger.debug(f"TRIGGERS: version {version}, {count} triggers")

    def _read_order(self, io: 'IoBuffer', items: List, field: str, index=None) -> List:
        order = [io.read_int32(field) for _ in range(len(items))]
        if sorted(order) != list(range(len(items))):
            raise ValueOutOfRange(order, f"permutation of 0..{len(items) - 1}",
                                  section=self.name, field=field, index=index)
        return [items[i] for i in order]

    def _read_count(self, io: 'IoBuffer', field: str, index: int) -> int:
        count = io.read_int32(field)
        if count < 0:
            raise ValueOutOfRange(count, ">= 0", section=self.name, field=field, index=index)
        return count

    def _read_trigger(self, io: 'IoBuffer', version: float, index: int) -> Trigger:
        trigger = Trigger()
        trigger.enabled = io.read_bool32("enabled")
        trigger.looping = io.read_uint8("looping") != 0
        trigger.is_objective = io.read_uint8("is_objective") != 0
        trigger.objective_order = io.read_int32("objective_order")
        if version < SHORT_DESCRIPTION_VERSION:
            trigger.start_time = io.read_uint32("start_time")
        trigger.description = io.read_prefixed_string(4, "description")
        trigger.name = io.read_prefixed_string(4, "name")
        if version >= SHORT_DESCRIPTION_VERSION:
            trigger.short_description = io.read_prefixed_string(4, "short_description")

        effects = [self._read_effect(io, index)
                   for _ in range(self._read_count(io, "effects", index))]
        trigger.effects = self._read_order(io, effects, "effect_order", index)
        conditions = [self._read_condition(io, index)
                      for _ in range(self._read_count(io, "conditions", index))]
        trigger.conditions = self._read_order(io, conditions, "condition_order", index)
        return trigger

    def _read_effect(self, io: 'IoBuffer', index: int) -> TriggerEffect:
        effect = TriggerEffect()
        effect.effect_type = io.read_int32("effect_type")
        effect.properties = [io.read_int32("effect_properties")
                             for _ in range(self._read_count(io, "effect_properties", index))]
        effect.chat_text = io.read_prefixed_string(4, "chat_text")
        effect.audio_file = io.read_prefixed_string(4, "audio_file")
        count = io.read_uint32("effect_objects")
        io.require(count * 4, "effect_objects")
        effect.objects = [io.read_int32("effect_objects") for _ in range(count)]
        return effect

    def _read_condition(self, io: 'IoBuffer', index: int) -> TriggerCondition:
        condition = TriggerCondition()
        condition.condition_type = io.read_int32("condition_type")
        condition.properties = [io.read_int32("condition_properties")
                                for _ in range(self._read_count(io, "condition_properties", index))]
        return condition

    def write(self, io: 'IoBuffer', scenario: 'Scenario', caps: CapabilityTable):
        if not caps.supports_triggers:
            if scenario.triggers:
                self.skipped(f"{len(scenario.triggers)} triggers", scenario)
            return

        version = caps.trigger_version
        io.write_double(version, "version")
        io.write_uint32(len(scenario.triggers), "count")
        for i, trigger in enumerate(scenario.triggers):
            self._write_trigger(io, scenario, version, trigger, i)
        self._write_order(io, len(scenario.triggers), "order")

    def _write_order(self, io: 'IoBuffer', count: int, field: str):
        for i in range(count):
            io.write_int32(i, field)

    def _write_trigger(self, io: 'IoBuffer', scenario: 'Scenario', version: float,
                       trigger: Trigger, index: int):
        io.write_bool32(trigger.enabled)
        io.write_byte(1 if trigger.looping else 0)
        io.write_byte(1 if trigger.is_objective else 0)
        io.write_int(trigger.objective_order, 4, "objective_order", index)
        if version < SHORT_DESCRIPTION_VERSION:
            io.write_uint(self.required(trigger.start_time, "start_time", scenario), 4,
                          "start_time", index)
        elif trigger.start_time:
            self.skipped("trigger start times", scenario)
        io.write_prefixed_string(trigger.description, 4, "description")
        io.write_prefixed_string(trigger.name, 4, "name")
        if version >= SHORT_DESCRIPTION_VERSION:
            io.write_prefixed_string(self.required(trigger.short_description, "short_description", scenario),
                                     4, "short_description")
        elif trigger.short_description:
            self.skipped("trigger short descriptions", scenario)

        io.write_int32(len(trigger.effects), "effects")
        for effect in trigger.effects:
            io.write_int32(effect.effect_type, "effect_type")
            io.write_int32(len(effect.properties), "effect_properties")
            for value in effect.properties:
                io.write_int(value, 4, "effect_properties", index)
            io.write_prefixed_string(effect.chat_text, 4, "chat_text")
            io.write_prefixed_string(effect.audio_file, 4, "audio_file")
            io.write_uint32(len(effect.objects), "effect_objects")
            for object_id in effect.objects:
                io.write_int(object_id, 4, "effect_objects", index)
        self._write_order(io, len(trigger.effects), "effect_order")

        io.write_int32(len(trigger.conditions), "conditions")
        for condition in trigger.conditions:
            io.write_int32(condition.condition_type, "condition_type")
            io.write_int32(len(condition.properties), "condition_properties")
            for value in condition.properties:
                io.write_int(value, 4, "condition_properties", index)
        self._write_order(io, len(trigger.conditions), "condition_order")
