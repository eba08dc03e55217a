"""Capability decorator generator.

Generates, for a base contract and a list of optional capability contracts,
a dispatch function returning a value that implements the base contract plus
exactly the capabilities whose accessors are present. One composite class is
generated ahead of time for every non-empty capability combination.

Usage:
    python decorate.py -p charger -f decorate_charger -b api.Charger \\
        -t "api.MeterEnergy,total_energy,Callable[[], float]" \\
        -t "api.Battery,soc,Callable[[], float]" -o charger_decorators
"""

import argparse
import keyword
import re
import sys
from dataclasses import dataclass
from itertools import chain, combinations
from pathlib import Path
from collections.abc import Iterable, Sequence
from typing import NamedTuple, TextIO

DEFAULT_FUNCTION = "decorate"
GENERATED_MARKER = "This file has been generated - do not modify"
LARGE_CAPABILITY_WARNING_THRESHOLD = 6
MAX_LINE_LENGTH = 88


# ===--- Errors ---=== #


VALID_ERROR_CODES = {
    "MISSING_BASE",
    "MISSING_PACKAGE",
    "MISSING_CAPABILITIES",
    "MALFORMED_CAPABILITY",
    "INVALID_TYPE_NAME",
    "INVALID_SIGNATURE",
    "INVALID_IDENTIFIER",
    "DUPLICATE_CAPABILITY",
    "MIXED_CONTRACT_MODULES",
    "CONFLICT_LIST_OUTPUT",
}


class ConfigError(Exception):
    def __init__(self, code: str, message: str, suggestion: str | None = None):
        if code not in VALID_ERROR_CODES:
            raise ValueError(f"Unknown config error code: {code}")
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion


class SynthesisError(Exception):
    """Generated structure is inconsistent; no source is emitted."""


class EmissionError(Exception):
    def __init__(self, path: Path | None, message: str):
        super().__init__(message)
        self.path = path
        self.message = message


# ===--- Capability table ---=== #

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_MODULE_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)*$")
_CALLABLE_RE = re.compile(r"^Callable\[(?P<inner>.*)\]$", re.DOTALL)

# Parameters the generated __init__ methods and dispatcher already declare.
RESERVED_VARIABLE_NAMES = frozenset({"base", "self"})

RECORD_FORMAT_HINT = (
    'Pass capabilities as -t "api.Type,method,Callable[[Arg, ...], Return]".'
)


class CapabilityRecord(NamedTuple):
    type_name: str
    function: str
    signature: str


class Signature(NamedTuple):
    """Parsed ``Callable[...]`` annotation.

    ``params`` is None for ``Callable[..., R]``, otherwise one annotation
    string per positional parameter.
    """

    raw: str
    params: tuple[str, ...] | None
    returns: str


@dataclass(frozen=True)
class BaseType:
    name: str
    short_name: str


@dataclass(frozen=True)
class CapabilityDefinition:
    """One optional capability of the base contract.

    Attributes:
        name: Qualified contract type, e.g. "api.Battery". Unique key.
        short_name: Type name without the module qualifier, e.g. "Battery".
        function: Name of the contract's single method, e.g. "soc".
        signature: Parsed call signature of the accessor.
        var_name: Local variable / parameter name, e.g. "battery".
    """

    name: str
    short_name: str
    function: str
    signature: Signature
    var_name: str


@dataclass(frozen=True)
class CapabilityTable:
    base: BaseType
    capabilities: tuple[CapabilityDefinition, ...]
    api_module: str
    contract_alias: str

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(cap.name for cap in self.capabilities)

    def get(self, name: str) -> CapabilityDefinition:
        for cap in self.capabilities:
            if cap.name == name:
                return cap
        raise SynthesisError(f"Unknown capability in combination: {name}")


def parse_capability_record(raw: str) -> CapabilityRecord:
    parts = [part.strip() for part in raw.split(",", 2)]
    if len(parts) != 3 or not all(parts):
        raise ConfigError(
            "MALFORMED_CAPABILITY",
            f"Capability record must have three fields, got: {raw!r}",
            RECORD_FORMAT_HINT,
        )
    return CapabilityRecord(*parts)


def split_type_name(name: str, flag: str) -> tuple[str, str]:
    qualifier, _, short = name.rpartition(".")
    if (
        not qualifier
        or not _MODULE_RE.match(qualifier)
        or not _IDENTIFIER_RE.match(short)
    ):
        raise ConfigError(
            "INVALID_TYPE_NAME",
            f"{flag} type must be module-qualified, got: {name!r}",
            "Use the form <module>.<Type>, for example api.Meter.",
        )
    return qualifier, short


def to_snake_case(name: str) -> str:
    return re.sub(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])", "_", name).lower()


def to_camel_case(name: str) -> str:
    return "".join(part[:1].upper() + part[1:] for part in name.split("_") if part)


def validate_identifier(name: str, what: str) -> str:
    if _IDENTIFIER_RE.match(name) and not keyword.iskeyword(name):
        return name
    raise ConfigError(
        "INVALID_IDENTIFIER",
        f"Invalid {what}: {name!r}",
        "Use a Python identifier that is not a keyword.",
    )


def _split_top_level(text: str) -> list[str]:
    """Split on commas outside brackets and string literals."""
    parts: list[str] = []
    current: list[str] = []
    depth = 0
    quote = ""
    escaped = False
    for ch in text:
        current.append(ch)
        if quote:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == quote:
                quote = ""
            continue
        if ch in "'\"":
            quote = ch
        elif ch in "[(":
            depth += 1
        elif ch in "])":
            depth -= 1
            if depth < 0:
                raise ValueError(f"unbalanced brackets in {text!r}")
        elif ch == "," and depth == 0:
            current.pop()
            parts.append("".join(current).strip())
            current = []
    if depth != 0 or quote:
        raise ValueError(f"unbalanced brackets or quotes in {text!r}")
    parts.append("".join(current).strip())
    return parts


def parse_signature(raw: str) -> Signature:
    """Parse a ``Callable[[A, B], R]`` or ``Callable[..., R]`` annotation.

    Only the bracket structure is checked. The parameter and return
    annotations are passed through verbatim into the generated source.

    Raises:
        ConfigError: INVALID_SIGNATURE when the text is not a Callable
            annotation with a parameter list and a return type.
    """
    text = raw.strip()
    error = ConfigError(
        "INVALID_SIGNATURE",
        f"Invalid capability signature: {raw!r}",
        "Signatures use the form Callable[[Arg, ...], Return] "
        "or Callable[..., Return].",
    )
    match = _CALLABLE_RE.match(text)
    if match is None:
        raise error
    try:
        outer = _split_top_level(match.group("inner"))
        if len(outer) != 2 or not all(outer):
            raise error
        params_text, returns = outer
        if params_text == "...":
            return Signature(text, None, returns)
        if not (params_text.startswith("[") and params_text.endswith("]")):
            raise error
        inner = params_text[1:-1].strip()
        params = tuple(_split_top_level(inner)) if inner else ()
    except ValueError as err:
        raise error from err
    if not all(params):
        raise error
    return Signature(text, params, returns)


def build_base_type(name: str) -> BaseType:
    _, short = split_type_name(name, "--base")
    return BaseType(name=name, short_name=short)


def build_capability(record: CapabilityRecord) -> CapabilityDefinition:
    _, short = split_type_name(record.type_name, "--type")
    function = validate_identifier(record.function, "capability method name")
    if function.startswith("_"):
        raise ConfigError(
            "INVALID_IDENTIFIER",
            f"Capability method must be public: {function!r}",
            "Drop the leading underscore from the method name.",
        )
    var_name = to_snake_case(short)
    if keyword.iskeyword(var_name):
        var_name += "_"
    return CapabilityDefinition(
        name=record.type_name,
        short_name=short,
        function=function,
        signature=parse_signature(record.signature),
        var_name=var_name,
    )


def build_capability_table(
    base: str,
    records: Iterable[CapabilityRecord],
    api_module: str | None = None,
) -> CapabilityTable:
    """Normalize raw capability records into a CapabilityTable.

    The contract module defaults to the qualifier of the base type. Every
    type must be qualified with the last component of that module, since
    the generated file imports it under that name.

    Raises:
        ConfigError: On malformed names, signatures, duplicates or mixed
            module qualifiers.
    """
    base_type = build_base_type(base)
    module = api_module or split_type_name(base, "--base")[0]
    if not _MODULE_RE.match(module):
        raise ConfigError(
            "INVALID_TYPE_NAME",
            f"Invalid contract module: {module!r}",
            "Pass a dotted module path, for example evcc.api.",
        )
    alias = module.rpartition(".")[2]

    capabilities = tuple(build_capability(record) for record in records)

    for type_name in (base, *(cap.name for cap in capabilities)):
        qualifier = type_name.rpartition(".")[0]
        if qualifier != alias:
            raise ConfigError(
                "MIXED_CONTRACT_MODULES",
                f"{type_name} is not qualified with the contract module {alias!r}",
                f"Qualify every type as {alias}.<Type> or pass --api.",
            )

    for attr, what in (
        ("name", "capability type"),
        ("function", "capability method"),
        ("var_name", "capability variable"),
    ):
        seen: set[str] = set()
        for cap in capabilities:
            value = getattr(cap, attr)
            if value in seen:
                raise ConfigError(
                    "DUPLICATE_CAPABILITY",
                    f"Duplicate {what}: {value}",
                    "Each capability must be listed once with a distinct method.",
                )
            seen.add(value)

    for cap in capabilities:
        if cap.var_name in RESERVED_VARIABLE_NAMES:
            raise ConfigError(
                "INVALID_IDENTIFIER",
                f"Capability variable name {cap.var_name!r} clashes with a "
                "generated parameter.",
                "Rename the capability type.",
            )

    return CapabilityTable(
        base=base_type,
        capabilities=capabilities,
        api_module=module,
        contract_alias=alias,
    )


# ===--- Combinations ---=== #


def enumerate_combinations(names: Sequence[str]) -> tuple[tuple[str, ...], ...]:
    """Return all non-empty subsets of names.

    Subsets are ordered by size, then by position of their members in
    names; members keep input order. Yields 2**n - 1 subsets, none for n = 0.
    """
    return tuple(
        chain.from_iterable(
            combinations(names, size) for size in range(1, len(names) + 1)
        )
    )


def presence_terms(
    table: CapabilityTable, combination: Sequence[str]
) -> tuple[tuple[str, bool], ...]:
    """Exact guard of the branch for combination: (var_name, present) per capability.

    The empty combination yields the zero branch guard (everything absent).
    """
    members = set(combination)
    return tuple((cap.var_name, cap.name in members) for cap in table.capabilities)


def check_combinations(
    table: CapabilityTable, combos: Sequence[Sequence[str]]
) -> None:
    """Raise SynthesisError unless combos are exactly the non-empty subsets."""
    known = set(table.names)
    distinct = {frozenset(combo) for combo in combos}
    expected = 2 ** len(table.capabilities) - 1
    if len(combos) != expected or len(distinct) != expected:
        raise SynthesisError(
            f"Expected {expected} distinct combinations, "
            f"got {len(distinct)} of {len(combos)}"
        )
    for combo in combos:
        if not combo or not set(combo) <= known:
            raise SynthesisError(f"Invalid combination: {', '.join(combo) or '()'}")


# ===--- Naming ---=== #


def adapter_class_name(prefix: str, cap: CapabilityDefinition) -> str:
    return f"_{prefix}{cap.short_name}Impl"


def composite_class_name(
    prefix: str, table: CapabilityTable, combination: Sequence[str]
) -> str:
    return "_" + prefix + "".join(table.get(name).short_name for name in combination)


def composite_base_name(prefix: str) -> str:
    return f"_{prefix}Composite"


def capability_methods_constant(function: str) -> str:
    return f"_{function.upper()}_CAPABILITY_METHODS"


def check_function_name(function: str, table: CapabilityTable) -> None:
    """Reject a dispatch name that would rebind a module-level import."""
    taken = {"annotations", "Callable", "Any", table.contract_alias}
    if function in taken:
        raise ConfigError(
            "INVALID_IDENTIFIER",
            f"Function name {function!r} clashes with a name imported by the "
            "generated module.",
            "Pick another --function.",
        )


def check_unique_class_names(
    prefix: str, table: CapabilityTable, combos: Sequence[Sequence[str]]
) -> None:
    names = [composite_base_name(prefix)]
    names.extend(adapter_class_name(prefix, cap) for cap in table.capabilities)
    names.extend(composite_class_name(prefix, table, combo) for combo in combos)
    seen: set[str] = set()
    for name in names:
        if name in seen:
            raise SynthesisError(f"Generated class name collision: {name}")
        seen.add(name)


# ===--- Synthesis ---=== #


def _method_params(signature: Signature) -> tuple[str, str]:
    """Return (parameter list after self, call arguments) for a signature."""
    if signature.params is None:
        return "*args: Any, **kwargs: Any", "*args, **kwargs"
    names = [f"arg{i}" for i in range(len(signature.params))]
    params = "".join(f", {n}: {t}" for n, t in zip(names, signature.params))
    return params.removeprefix(", "), ", ".join(names)


def _method_def(function: str, signature: Signature, body: str) -> list[str]:
    params, args = _method_params(signature)
    head = f"self, {params}" if params else "self"
    return [
        f"    def {function}({head}) -> {signature.returns}:",
        f"        return {body.format(args=args)}",
    ]


def _guard_lines(terms: Sequence[tuple[str, bool]]) -> list[str]:
    tests = [
        f"{var} is not None" if present else f"{var} is None" for var, present in terms
    ]
    line = f"    if {' and '.join(tests)}:"
    if len(line) <= MAX_LINE_LENGTH:
        return [line]
    lines = ["    if ("]
    lines.append(f"        {tests[0]}")
    lines.extend(f"        and {test}" for test in tests[1:])
    lines.append("    ):")
    return lines


def synthesize_adapter(prefix: str, cap: CapabilityDefinition) -> list[str]:
    return [
        f"class {adapter_class_name(prefix, cap)}:",
        f'    __slots__ = ("_{cap.var_name}",)',
        "",
        f"    def __init__(self, {cap.var_name}: {cap.signature.raw}) -> None:",
        f"        self._{cap.var_name} = {cap.var_name}",
        "",
        *_method_def(cap.function, cap.signature, f"self._{cap.var_name}({{args}})"),
    ]


def synthesize_composite_base(
    prefix: str, function: str, table: CapabilityTable
) -> list[str]:
    """Shared composite root: holds the base value and delegates to it.

    Lookups of capability methods never reach the base value, so a
    composite exposes only the capabilities it declares.
    """
    constant = capability_methods_constant(function)
    names = sorted(cap.function for cap in table.capabilities)
    methods = ", ".join(f'"{name}"' for name in names)
    return [
        f"{constant} = frozenset({{{methods}}})",
        "",
        "",
        f"class {composite_base_name(prefix)}:",
        f"    def __init__(self, base: {table.base.name}) -> None:",
        "        self._base = base",
        "",
        "    def __getattr__(self, name: str) -> Any:",
        f'        if name == "_base" or name in {constant}:',
        "            raise AttributeError(name)",
        "        return getattr(self._base, name)",
    ]


def synthesize_composite(
    prefix: str, table: CapabilityTable, combination: Sequence[str]
) -> list[str]:
    caps = [table.get(name) for name in combination]
    bases = ", ".join([composite_base_name(prefix), *(cap.name for cap in caps)])
    lines = [
        f"class {composite_class_name(prefix, table, combination)}({bases}):",
        "    def __init__(",
        "        self,",
        f"        base: {table.base.name},",
    ]
    lines.extend(
        f"        {cap.var_name}: {adapter_class_name(prefix, cap)}," for cap in caps
    )
    lines.append("    ) -> None:")
    lines.append("        super().__init__(base)")
    lines.extend(f"        self._{cap.var_name} = {cap.var_name}" for cap in caps)
    for cap in caps:
        lines.append("")
        lines.extend(
            _method_def(
                cap.function,
                cap.signature,
                f"self._{cap.var_name}.{cap.function}({{args}})",
            )
        )
    return lines


def synthesize_dispatch(
    prefix: str,
    function: str,
    table: CapabilityTable,
    combos: Sequence[Sequence[str]],
) -> list[str]:
    """Emit the dispatch function.

    One branch per presence pattern: the zero branch returns base unchanged,
    every other branch requires the present accessors to equal its
    combination exactly.
    """
    base = table.base.name
    if not table.capabilities:
        return [f"def {function}(base: {base}) -> {base}:", "    return base"]

    lines = [f"def {function}(", f"    base: {base},"]
    lines.extend(
        f"    {cap.var_name}: {cap.signature.raw} | None," for cap in table.capabilities
    )
    lines.append(f") -> {base}:")
    lines.extend(_guard_lines(presence_terms(table, ())))
    lines.append("        return base")

    for combo in combos:
        lines.append("")
        lines.extend(_guard_lines(presence_terms(table, combo)))
        lines.append(f"        return {composite_class_name(prefix, table, combo)}(")
        lines.append("            base,")
        for name in combo:
            cap = table.get(name)
            adapter = adapter_class_name(prefix, cap)
            lines.append(f"            {cap.var_name}={adapter}({cap.var_name}),")
        lines.append("        )")

    lines.append("")
    lines.append(f'    raise AssertionError("{function}: no branch matched")')
    return lines


# ===--- Assembly ---=== #

_HEADER_BORDER: str = "# x-------------------------------------------x #"


def format_file_header(package: str, table: CapabilityTable) -> list[str]:
    lines = [
        _HEADER_BORDER,
        f"# | {GENERATED_MARKER}",
        f"# | Package: {package}",
        f"# | Base: {table.base.name}",
    ]
    if table.capabilities:
        lines.append(f"# | Capabilities: {', '.join(table.names)}")
    lines.append(_HEADER_BORDER)
    return lines


def format_import_block(table: CapabilityTable) -> list[str]:
    lines = ["from __future__ import annotations", ""]
    if table.capabilities:
        lines.append("from collections.abc import Callable")
        lines.append("from typing import Any")
        lines.append("")
    package, _, alias = table.api_module.rpartition(".")
    lines.append(f"from {package} import {alias}" if package else f"import {alias}")
    return lines


def generate(package: str, function: str, table: CapabilityTable) -> str:
    """Return the complete generated module source.

    Sections in order: header, imports, dispatch function, composites,
    adapters. Output is stripped and ends with exactly one newline.

    Raises:
        ConfigError: INVALID_IDENTIFIER when function shadows an import.
        SynthesisError: If the combinations or generated class names are
            structurally inconsistent.
    """
    check_function_name(function, table)
    prefix = to_camel_case(function)
    combos = enumerate_combinations(table.names)
    check_combinations(table, combos)
    check_unique_class_names(prefix, table, combos)

    blocks: list[list[str]] = [
        format_file_header(package, table),
        format_import_block(table),
        synthesize_dispatch(prefix, function, table, combos),
    ]
    if combos:
        blocks.append(synthesize_composite_base(prefix, function, table))
    blocks.extend(synthesize_composite(prefix, table, combo) for combo in combos)
    blocks.extend(synthesize_adapter(prefix, cap) for cap in table.capabilities)

    parts: list[str] = []
    for index, block in enumerate(blocks):
        if index > 1:
            parts.extend(["", ""])
        elif index == 1:
            parts.append("")
        parts.extend(block)
    return "\n".join(parts).strip() + "\n"


# ===--- Emission ---=== #


@dataclass(frozen=True)
class FileWriteResult:
    path: Path
    line_count: int
    byte_count: int


def normalize_output_path(out: Path) -> Path:
    return out if out.suffix == ".py" else out.with_name(out.name + ".py")


def write_output(
    content: str, out: Path | None, stream: TextIO | None = None
) -> FileWriteResult | None:
    """Write generated source to out, or to stream (stdout) when out is None.

    Raises:
        EmissionError: Wrapping the OSError of a failed write.
    """
    if out is None:
        target = sys.stdout if stream is None else stream
        try:
            target.write(content)
        except OSError as err:
            raise EmissionError(None, f"Cannot write to stdout: {err}") from err
        return None

    path = normalize_output_path(Path(out))
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as err:
        raise EmissionError(path, f"Cannot write {path}: {err}") from err
    return FileWriteResult(
        path=path.resolve(),
        line_count=content.count("\n"),
        byte_count=len(content.encode("utf-8")),
    )


# ===--- CLI config ---=== #


@dataclass(frozen=True)
class GenerateConfig:
    package: str
    function: str
    table: CapabilityTable
    out: Path | None


@dataclass(frozen=True)
class ListConfig:
    function: str
    table: CapabilityTable


def build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="decorate",
        description="Generate capability decorators for a base contract",
        epilog='decorate [flags] -t "api.Type,method,Callable[[...], Return]"',
    )
    parser.add_argument("-o", "--out", type=Path, default=None, help="output file")
    parser.add_argument("-p", "--package", type=str, default=None, help="package name")
    parser.add_argument(
        "-f", "--function", type=str, default=DEFAULT_FUNCTION, help="function name"
    )
    parser.add_argument("-b", "--base", type=str, default=None, help="base type")
    parser.add_argument(
        "-a", "--api", type=str, default=None, help="module defining the contracts"
    )
    parser.add_argument(
        "-t",
        "--type",
        dest="types",
        action="append",
        default=None,
        help="capability definition: type,method,signature (repeatable)",
    )
    parser.add_argument(
        "--list-combinations",
        action="store_true",
        default=False,
        help="print the generated combinations instead of source",
    )
    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = build_argument_parser()
    return parser.parse_args(argv)


def validate_config(args: argparse.Namespace) -> GenerateConfig | ListConfig:
    if not args.base:
        raise ConfigError(
            "MISSING_BASE", "--base is required.", "Pass --base api.<Type>."
        )
    if not args.types:
        raise ConfigError(
            "MISSING_CAPABILITIES",
            "At least one --type is required.",
            RECORD_FORMAT_HINT,
        )
    if args.list_combinations and args.out is not None:
        raise ConfigError(
            "CONFLICT_LIST_OUTPUT",
            "--list-combinations cannot be combined with --out.",
            "Drop --out, the listing is printed to stdout.",
        )

    function = validate_identifier(to_snake_case(args.function), "function name")
    records = [parse_capability_record(raw) for raw in args.types]
    table = build_capability_table(args.base, records, args.api)
    check_function_name(function, table)

    if args.list_combinations:
        return ListConfig(function=function, table=table)

    if not args.package:
        raise ConfigError(
            "MISSING_PACKAGE",
            "--package is required.",
            "Pass the name of the package the generated file belongs to.",
        )
    return GenerateConfig(
        package=args.package,
        function=function,
        table=table,
        out=args.out,
    )


def build_config(argv: list[str] | None = None) -> GenerateConfig | ListConfig:
    return validate_config(parse_args(argv))


# ===--- Summary report ---=== #


@dataclass(frozen=True)
class GenerationSummary:
    function: str
    base: str
    capability_count: int
    composite_count: int
    adapter_count: int
    destination: str
    line_count: int


def build_generation_summary(
    config: GenerateConfig, result: FileWriteResult
) -> GenerationSummary:
    n = len(config.table.capabilities)
    return GenerationSummary(
        function=config.function,
        base=config.table.base.name,
        capability_count=n,
        composite_count=2**n - 1,
        adapter_count=n,
        destination=str(result.path),
        line_count=result.line_count,
    )


def format_generation_summary(summary: GenerationSummary) -> str:
    lines = [
        f"{summary.function} generated:",
        "",
        f"  Base:         {summary.base}",
        f"  Capabilities: {summary.capability_count:>6}",
        f"  Composites:   {summary.composite_count:>6}",
        f"  Adapters:     {summary.adapter_count:>6}",
        f"  Output:       {summary.destination} ({summary.line_count:,} lines)",
        "",
    ]
    return "\n".join(lines)


def print_generation_summary(summary: GenerationSummary) -> None:
    print(format_generation_summary(summary), end="", file=sys.stderr)


def format_combinations_table(function: str, table: CapabilityTable) -> str:
    """Render --list-combinations output.

        decorate_meter: 3 combinations of 2 capabilities for api.Meter

          _DecorateMeterBattery              api.Battery
          ...
    """
    prefix = to_camel_case(function)
    combos = enumerate_combinations(table.names)
    rows = [
        (composite_class_name(prefix, table, combo), ", ".join(combo))
        for combo in combos
    ]
    width = max((len(name) for name, _ in rows), default=0)
    lines = [
        f"{function}: {len(combos)} combinations of {len(table.capabilities)} "
        f"capabilities for {table.base.name}",
        "",
    ]
    lines.extend(f"  {name:<{width}}  {members}" for name, members in rows)
    lines.append("")
    return "\n".join(lines)


def warn_if_large(table: CapabilityTable) -> None:
    n = len(table.capabilities)
    if n > LARGE_CAPABILITY_WARNING_THRESHOLD:
        print(
            f"Warning: {n} capabilities produce {2**n - 1} composite types; "
            "generation time and output size grow exponentially.",
            file=sys.stderr,
        )


# ===--- Main generation ---=== #


def run_generate(config: GenerateConfig) -> FileWriteResult | None:
    warn_if_large(config.table)
    source = generate(config.package, config.function, config.table)
    result = write_output(source, config.out)
    if result is not None:
        print_generation_summary(build_generation_summary(config, result))
    return result


def run_list(config: ListConfig) -> None:
    warn_if_large(config.table)
    print(format_combinations_table(config.function, config.table), end="")


def main(argv: list[str] | None = None) -> None:
    try:
        config = build_config(argv)
    except ConfigError as err:
        print(f"Config error [{err.code}]: {err.message}", file=sys.stderr)
        if err.suggestion:
            print(f"Hint: {err.suggestion}", file=sys.stderr)
        raise SystemExit(2) from err

    if isinstance(config, ListConfig):
        run_list(config)
        return

    try:
        run_generate(config)
    except EmissionError as err:
        print(f"Error: {err.message}", file=sys.stderr)
        raise SystemExit(1) from err
    except SynthesisError as err:
        print(f"Internal error: {err}", file=sys.stderr)
        raise SystemExit(1) from err


if __name__ == "__main__":
    main()
