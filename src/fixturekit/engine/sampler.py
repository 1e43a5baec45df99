"""The generation engine.

One call to :meth:`Sampler.sample` walks the descriptor tree depth-first:

1. every customization path is resolved against the root descriptor;
2. collection and map sizes are resolved (exact-path ``SIZE`` rule, then the
   default range);
3. each realized position picks its winning value customization, exact
   indices beating wildcards and later registrations beating earlier ones;
4. literals short-circuit their subtree, generators replace the default
   generator, nulls are only accepted on nullable members;
5. record types are pushed on a recursion stack bounded by the depth limit;
6. the finished instance is checked against every postcondition and the
   whole generation restarts on failure until the retry budget is spent.

Only postcondition failures are retried.  Path, recursion and introspection
errors propagate from the failing call unchanged.
"""

from __future__ import annotations

import random
from collections.abc import Iterable, Iterator, Mapping, Sequence
from typing import Any

from ..arbitrary import GeneratorRegistry
from ..config import ConfigModel
from ..customization import Customization, Operation
from ..introspect import Construction, Introspector, Kind, Member, TypeDescriptor
from ..path import PathResolver, Step, StepKind
from ..utils.errors import (
    GenerationConstraintConflict,
    InvalidPathError,
    PostConditionUnsatisfiable,
    RecursionLimitExceeded,
)
from ..utils.logging import get_logger
from .context import GenerationContext
from .nodes import GenerationNode

__all__ = ["Sampler"]

log = get_logger(__name__)

_VALUE_OPS = frozenset(op for op in Operation if op.is_value)
_OVERLAY_OPS = frozenset({Operation.SET, Operation.SET_NULL})
_SIZE_OPS = frozenset({Operation.SIZE})
_DISTINCT_TRIES = 32
# Member names are identifiers, so no pattern can address map keys through this step.
_KEY_STEP = Step.member("<key>")


def _winner(
    rules: Iterable[Customization], position: tuple[Step, ...], ops: frozenset[Operation]
) -> Customization | None:
    best: Customization | None = None
    for rule in rules:
        if rule.operation in ops and rule.path.matches(position):
            if best is None or rule.rank() > best.rank():
                best = rule
    return best


def _targets_below(rules: Iterable[Customization], position: tuple[Step, ...]) -> bool:
    return any(rule.path.targets_below(position) for rule in rules)


def _steps_below(
    rules: Iterable[Customization], position: tuple[Step, ...]
) -> Iterator[tuple[Step, Customization]]:
    """Yield the step right below ``position`` for every rule reaching into it."""

    for rule in rules:
        if rule.operation is not Operation.POST_CONDITION and rule.path.targets_below(position):
            yield rule.path.step_after(position), rule


def _values_at(node: GenerationNode, steps: tuple[Step, ...]) -> Iterator[Any]:
    """Yield the realized values below ``node`` addressed by ``steps``.

    Literals and generator output have no child nodes; below them the
    finished value itself is walked.
    """

    if not steps:
        yield node.value
        return
    if not node.children:
        yield from _walk_value(node.value, steps)
        return
    step, rest = steps[0], steps[1:]
    for child in node.children:
        if step.matches(child.position[-1]):
            yield from _values_at(child, rest)


def _walk_value(value: Any, steps: tuple[Step, ...]) -> Iterator[Any]:
    if not steps:
        yield value
        return
    if value is None:
        return
    step, rest = steps[0], steps[1:]
    if step.kind is StepKind.MEMBER:
        if hasattr(value, step.value):
            yield from _walk_value(getattr(value, step.value), rest)
        return
    if isinstance(value, Mapping):
        if step.kind is StepKind.WILDCARD:
            found = list(value.values())
        else:
            found = [value[step.value]] if step.value in value else []
    else:
        items = list(value)
        if step.kind is StepKind.WILDCARD:
            found = items
        elif not isinstance(step.value, int):
            found = []
        else:
            found = [items[step.value]] if 0 <= step.value < len(items) else []
    for item in found:
        yield from _walk_value(item, rest)


class Sampler:
    """Generate instances from descriptors and customization logs."""

    def __init__(
        self,
        cfg: ConfigModel,
        introspector: Introspector,
        registry: GeneratorRegistry,
    ) -> None:
        self.cfg = cfg
        self.introspector = introspector
        self.registry = registry
        self.resolver = PathResolver(introspector)

    # -- Entry points -------------------------------------------------------

    def validate(self, root: TypeDescriptor, customizations: Sequence[Customization]) -> None:
        """Resolve every customization path against ``root``.

        Raises
        ------
        InvalidPathError
            On missing members, bad indexing, ``SIZE`` on non-sized nodes or
            ``SET_NULL`` on non-nullable nodes.
        """

        for rule in customizations:
            target = self.resolver.resolve(rule.path, root)
            if rule.operation is Operation.SIZE and not target.kind.is_indexable:
                raise InvalidPathError(
                    f"{rule.describe()}: {target.name} is not a collection or map",
                    path=rule.path.expression,
                )
            if rule.operation is Operation.SET_NULL and not target.nullable:
                raise InvalidPathError(
                    f"{rule.describe()}: {target.name} is not nullable",
                    path=rule.path.expression,
                )

    def sample(
        self,
        root: TypeDescriptor,
        customizations: Sequence[Customization],
        rng: random.Random,
    ) -> Any:
        """Generate one instance of ``root`` honouring ``customizations``."""

        self.validate(root, customizations)
        gen = self.cfg.generation
        ctx = GenerationContext(rng, gen.retry_limit, gen.recursion_depth_limit)
        while True:
            ctx.begin_attempt(customizations)
            node = GenerationNode(root)
            value = self._generate(node, ctx)
            failed = self._violated(node, ctx)
            if failed is None:
                return value
            log.debug(
                "attempt %d/%d for %s rejected by %s",
                ctx.attempt,
                ctx.retry_limit,
                root.name,
                failed.describe(),
            )
            if ctx.attempt >= ctx.retry_limit:
                log.warning(
                    "giving up on %s after %d attempts", root.name, ctx.attempt
                )
                raise PostConditionUnsatisfiable(
                    f"postcondition {failed.path} on {root.name} still failing after "
                    f"{ctx.attempt} attempts",
                    attempts=ctx.attempt,
                )

    # -- Tree walk ----------------------------------------------------------

    def _generate(self, node: GenerationNode, ctx: GenerationContext) -> Any:
        value = self._produce(node, ctx)
        node.value = value
        return value

    def _produce(self, node: GenerationNode, ctx: GenerationContext) -> Any:
        desc = node.descriptor
        if desc.constraints:
            ctx.add_constraints([c.rebase(node.position) for c in desc.constraints])

        winner = _winner(ctx.rules, node.position, _VALUE_OPS)
        node.customization = winner
        if winner is not None and winner.operation is Operation.SET_NULL:
            if not desc.nullable:
                raise InvalidPathError(
                    f"{winner.describe()}: {desc.name} at {node.path} is not nullable",
                    path=winner.path.expression,
                )
            return None
        overlays = [r for r in ctx.rules if r.operation in _OVERLAY_OPS and not r.translated]
        if winner is not None and winner.is_literal:
            later = [r for r in overlays if r.order > winner.order]
            return self._overlay(node, winner.value, later, ctx)

        forced = winner is not None
        if desc.nullable and not forced and self._inject_null(node, ctx):
            return None

        per_path = winner.generator if winner is not None else None
        generator = self.registry.resolve_generator(desc, per_path)
        if generator is not None:
            return self._overlay(node, generator.generate(ctx.rng), overlays, ctx)
        if desc.kind is Kind.COLLECTION:
            return self._generate_collection(node, ctx)
        if desc.kind is Kind.MAP:
            return self._generate_map(node, ctx)
        return self._generate_record(node, ctx, forced)

    def _inject_null(self, node: GenerationNode, ctx: GenerationContext) -> bool:
        gen = self.cfg.generation
        if gen.default_not_null or gen.null_probability <= 0.0:
            return False
        if _targets_below(ctx.rules, node.position):
            return False
        if _winner(ctx.rules, node.position, _SIZE_OPS) is not None:
            return False
        return ctx.rng.random() < gen.null_probability

    def _generate_record(
        self, node: GenerationNode, ctx: GenerationContext, forced: bool = False
    ) -> Any:
        desc = node.descriptor
        if ctx.depth_of(desc.py_type) >= ctx.depth_limit:
            if desc.nullable and not forced:
                return None
            reason = "is required to be non-null" if desc.nullable else "is not nullable"
            raise RecursionLimitExceeded(
                f"{desc.name} at {node.path} nests itself more than "
                f"{ctx.depth_limit} times and {reason}"
            )
        values: list[tuple[Member, Any]] = []
        with ctx.entering(desc.py_type):
            for member in desc.members:
                child = self._member_node(node, member)
                values.append((member, self._generate(child, ctx)))
        return self._construct(desc, values)

    def _member_node(self, node: GenerationNode, member: Member) -> GenerationNode:
        return node.child(self.introspector.describe(member.annotation), Step.member(member.name))

    def _resolve_size(
        self, node: GenerationNode, ctx: GenerationContext, element: TypeDescriptor
    ) -> tuple[int, bool]:
        """Return the realized size and whether it was requested explicitly."""

        rule = _winner(ctx.rules, node.position, _SIZE_OPS)
        if rule is not None and rule.size is not None:
            low, high = rule.size
            return ctx.rng.randint(low, high), True
        if element.kind.is_record and ctx.depth_of(element.py_type) >= ctx.depth_limit:
            return 0, False
        low, high = self.registry.size_range
        return ctx.rng.randint(low, high), False

    def _check_indexes(
        self, node: GenerationNode, size: int, rules: Iterable[Customization]
    ) -> None:
        for step, rule in _steps_below(rules, node.position):
            if step.kind is StepKind.INDEX and step.value >= size:
                raise InvalidPathError(
                    f"{rule.describe()}: index {step.value} is out of range for {node.path} "
                    f"with {size} generated element(s)",
                    path=rule.path.expression,
                )

    def _generate_collection(self, node: GenerationNode, ctx: GenerationContext) -> Any:
        desc = node.descriptor
        element = self.introspector.describe(desc.element)
        size, _ = self._resolve_size(node, ctx, element)
        self._check_indexes(node, size, ctx.rules)
        distinct = desc.py_type in (set, frozenset)
        seen: set[Any] = set()
        items: list[Any] = []
        for index in range(size):
            value = self._generate(node.child(element, Step.index(index)), ctx)
            tries = 0
            while distinct and value in seen:
                tries += 1
                if tries > _DISTINCT_TRIES:
                    raise GenerationConstraintConflict(
                        f"cannot realize {size} distinct elements for {desc.name} at {node.path}"
                    )
                node.discard_last_child()
                value = self._generate(node.child(element, Step.index(index)), ctx)
            if distinct:
                seen.add(value)
            items.append(value)
        return desc.py_type(items)

    def _explicit_keys(self, node: GenerationNode, rules: Iterable[Customization]) -> list[Any]:
        keys: list[Any] = []
        for step, _ in _steps_below(rules, node.position):
            if step.kind in (StepKind.INDEX, StepKind.KEY) and step.value not in keys:
                keys.append(step.value)
        return keys

    def _generate_map(self, node: GenerationNode, ctx: GenerationContext) -> Any:
        desc = node.descriptor
        key_desc = self.introspector.describe(desc.key)
        value_desc = self.introspector.describe(desc.value)
        size, explicit_size = self._resolve_size(node, ctx, value_desc)
        keys = self._explicit_keys(node, ctx.rules)
        if explicit_size and len(keys) > size:
            raise GenerationConstraintConflict(
                f"{len(keys)} keys are addressed below {node.path} but its size is {size}"
            )
        tries = 0
        while len(keys) < size:
            key = self._generate(GenerationNode(key_desc, node.position + (_KEY_STEP,)), ctx)
            if key in keys:
                tries += 1
                if tries > _DISTINCT_TRIES * max(size, 1):
                    raise GenerationConstraintConflict(
                        f"cannot realize {size} distinct keys for {desc.name} at {node.path}"
                    )
                continue
            keys.append(key)
        pairs = [(key, self._generate(node.child(value_desc, Step.key(key)), ctx)) for key in keys]
        return desc.py_type(pairs)

    # -- Construction -------------------------------------------------------

    def _construct(self, desc: TypeDescriptor, values: Sequence[tuple[Member, Any]]) -> Any:
        cls = desc.py_type
        if desc.construction is Construction.CONSTRUCTOR:
            return cls(**{member.argument_name: value for member, value in values})
        if desc.construction is Construction.FIELD_ASSIGNMENT:
            obj = cls()
            for member, value in values:
                setattr(obj, member.name, value)
            return obj
        if desc.construction is Construction.BUILDER and desc.builder is not None:
            builder = desc.builder()
            for member, value in values:
                builder = self._apply_builder(builder, member.name, value)
            return builder.build()
        raise GenerationConstraintConflict(f"{desc.name} cannot be constructed from members")

    @staticmethod
    def _apply_builder(builder: Any, name: str, value: Any) -> Any:
        for attr in (name, f"with_{name}"):
            setter = getattr(builder, attr, None)
            if callable(setter):
                result = setter(value)
                return builder if result is None else result
        setattr(builder, name, value)
        return builder

    # -- Overlays -----------------------------------------------------------

    def _overlay(
        self,
        node: GenerationNode,
        value: Any,
        rules: list[Customization],
        ctx: GenerationContext,
    ) -> Any:
        """Apply customizations targeting the interior of an already built value."""

        rules = [r for r in rules if r.path.targets_below(node.position)]
        if not rules:
            return value
        desc = node.descriptor
        if value is None:
            raise InvalidPathError(
                f"{rules[0].describe()}: the value at {node.path} is None",
                path=rules[0].path.expression,
            )
        if desc.kind.is_record:
            parts: list[tuple[Member, Any]] = []
            for member in desc.members:
                child = self._member_node(node, member)
                current = getattr(value, member.name)
                parts.append((member, self._overlay_child(child, current, rules, ctx)))
            return self._construct(desc, parts)
        if desc.kind is Kind.COLLECTION:
            element = self.introspector.describe(desc.element)
            items = list(value)
            self._check_indexes(node, len(items), rules)
            new_items = [
                self._overlay_child(node.child(element, Step.index(i)), item, rules, ctx)
                for i, item in enumerate(items)
            ]
            return desc.py_type(new_items)
        if desc.kind is Kind.MAP:
            value_desc = self.introspector.describe(desc.value)
            keys = list(value)
            keys.extend(k for k in self._explicit_keys(node, rules) if k not in value)
            pairs = []
            for key in keys:
                child = node.child(value_desc, Step.key(key))
                pairs.append((key, self._overlay_child(child, value.get(key), rules, ctx)))
            return desc.py_type(pairs)
        return value

    def _overlay_child(
        self,
        node: GenerationNode,
        current: Any,
        rules: list[Customization],
        ctx: GenerationContext,
    ) -> Any:
        winner = _winner(rules, node.position, _OVERLAY_OPS)
        node.customization = winner
        if winner is None:
            value = self._overlay(node, current, rules, ctx)
        elif winner.operation is Operation.SET_NULL:
            if not node.descriptor.nullable:
                raise InvalidPathError(
                    f"{winner.describe()}: {node.descriptor.name} at {node.path} is not nullable",
                    path=winner.path.expression,
                )
            value = None
        elif winner.generator is not None:
            value = self._overlay(node, winner.generator.generate(ctx.rng), rules, ctx)
        else:
            later = [r for r in rules if r.order > winner.order]
            value = self._overlay(node, winner.value, later, ctx)
        node.value = value
        return value

    # -- Postconditions -----------------------------------------------------

    def _violated(self, root: GenerationNode, ctx: GenerationContext) -> Customization | None:
        for rule in ctx.post_rules:
            predicate = rule.predicate
            if predicate is None:
                raise GenerationConstraintConflict(f"{rule.describe()} has no predicate")
            for value in _values_at(root, rule.path.steps):
                if not predicate(value):
                    return rule
        return None
