"""
The operation contract consumed by the graph builder.

Loaders (TensorFlow, Torch FX, JAXPR) translate framework graphs into
objects satisfying :class:`Operation`. ``RawOperation`` is the in-memory
implementation they all produce.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Protocol, Sequence, Tuple, Union

Text = Union[str, bytes]


class Operation(Protocol):
    """
    One computational step of a framework graph.

    Attributes:
        name: Fully-qualified hierarchical name (e.g. ``scope/sub/op``).
        type: Operation kind (e.g. ``MatMul``).
        inputs: Per input slot, the producing operation and its output slot.
        output_consumers: Per output slot, every consuming operation and the
            input slot it reads the value into.
        control_inputs: Operations this one must run after.
        control_outputs: Operations that must run after this one.
    """

    @property
    def name(self) -> Text: ...

    @property
    def type(self) -> Text: ...

    @property
    def inputs(self) -> Sequence[Tuple["Operation", int]]: ...

    @property
    def output_consumers(self) -> Sequence[Sequence[Tuple["Operation", int]]]: ...

    @property
    def control_inputs(self) -> Sequence["Operation"]: ...

    @property
    def control_outputs(self) -> Sequence["Operation"]: ...


@dataclass(eq=False)
class RawOperation:
    """Mutable operation record; wire instances with :func:`connect`."""

    name: Text
    type: Text
    inputs: List[Tuple["RawOperation", int]] = field(default_factory=list)
    output_consumers: List[List[Tuple["RawOperation", int]]] = field(
        default_factory=list
    )
    control_inputs: List["RawOperation"] = field(default_factory=list)
    control_outputs: List["RawOperation"] = field(default_factory=list)

    def __repr__(self) -> str:
        return f"RawOperation(name={self.name!r}, type={self.type!r})"

    def ensure_outputs(self, count: int) -> None:
        while len(self.output_consumers) < count:
            self.output_consumers.append([])


def connect(
    producer: RawOperation,
    output_index: int,
    consumer: RawOperation,
    input_index: Optional[int] = None,
) -> int:
    """
    Feed ``producer``'s output slot into the next (or given) input slot of
    ``consumer``, recording the relationship on both sides.

    Returns:
        The consumer input slot that was used.
    """
    if output_index < 0:
        raise ValueError(f"Negative output slot {output_index} on `{producer.name}`.")
    if input_index is None:
        input_index = len(consumer.inputs)
    if input_index != len(consumer.inputs):
        raise ValueError(
            f"Input slots of `{consumer.name}` must be filled in order: "
            f"expected {len(consumer.inputs)}, got {input_index}."
        )
    consumer.inputs.append((producer, output_index))
    producer.ensure_outputs(output_index + 1)
    producer.output_consumers[output_index].append((consumer, input_index))
    return input_index


def add_control_dependency(before: RawOperation, after: RawOperation) -> None:
    """Record that ``after`` must execute after ``before``."""
    if before not in after.control_inputs:
        after.control_inputs.append(before)
    if after not in before.control_outputs:
        before.control_outputs.append(after)
