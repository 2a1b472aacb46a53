"""Syntax-tree analysis of TypeScript/JavaScript sources using tree-sitter.

A single pre-order walk collects functions, classes, interfaces, type aliases,
imports and exports. Files whose tree contains syntax errors are reported as
a :class:`FallbackResult` so the caller can switch to the text heuristics.
"""

import logging
from typing import Any

import tree_sitter
import tree_sitter_typescript

from tshealth.health.metrics import BaseSourceAnalyzer, FallbackResult, StructuralResult
from tshealth.health.models import (
    ClassRecord,
    ExportRecord,
    FunctionRecord,
    HeritageClause,
    ImportBinding,
    ImportRecord,
    InterfaceRecord,
    MethodSignature,
    ParameterRecord,
    PropertyRecord,
    PropertySignature,
    SignatureParameter,
    SourceUnit,
    TypeAliasRecord,
)

logger = logging.getLogger(__name__)

# "function" is the expression node name in older grammar releases
FUNCTION_NODE_TYPES = frozenset(
    {
        "function_declaration",
        "generator_function_declaration",
        "method_definition",
        "arrow_function",
        "function_expression",
        "function",
        "generator_function",
    }
)
RECORDED_FUNCTION_TYPES = FUNCTION_NODE_TYPES | {"abstract_method_signature"}
# Initializers that also produce a record named after their variable
INITIALIZER_FUNCTION_TYPES = frozenset(
    {"arrow_function", "function_expression", "function", "generator_function"}
)
CLASS_NODE_TYPES = frozenset({"class_declaration", "abstract_class_declaration"})
BRANCH_NODE_TYPES = frozenset(
    {
        "if_statement",
        "while_statement",
        "for_statement",
        "for_in_statement",  # for-in and for-of
        "do_statement",
        "switch_statement",
        "switch_case",
        "catch_clause",
        "ternary_expression",
    }
)
LOGICAL_OPERATORS = frozenset({"&&", "||"})
NESTED_FUNCTION_POLICIES = ("include", "exclude")

_LANGUAGES: dict[str, tree_sitter.Language] = {}


def get_language(dialect: str) -> tree_sitter.Language:
    """Load and cache the tree-sitter grammar for a dialect."""
    if dialect not in _LANGUAGES:
        if dialect == "tsx":
            raw = tree_sitter_typescript.language_tsx()
        else:
            raw = tree_sitter_typescript.language_typescript()
        _LANGUAGES[dialect] = tree_sitter.Language(raw)
    return _LANGUAGES[dialect]


def calculate_node_complexity(node: Any, include_nested: bool = True) -> int:
    """Cyclomatic complexity of a function node.

    Args:
        node: Function-like syntax node
        include_nested: Whether branches inside nested functions count toward
            this node

    Returns:
        1 plus the number of branching constructs found
    """
    complexity = 1
    stack = list(node.named_children)
    while stack:
        current = stack.pop()
        if current.type in BRANCH_NODE_TYPES:
            complexity += 1
        elif current.type == "binary_expression":
            operator = current.child_by_field_name("operator")
            if operator is not None and operator.type in LOGICAL_OPERATORS:
                complexity += 1

        if not include_nested and current.type in FUNCTION_NODE_TYPES:
            continue
        stack.extend(current.named_children)
    return complexity


def _text(node: Any, source: bytes) -> str:
    return source[node.start_byte : node.end_byte].decode("utf-8", errors="replace")


def _unquote(text: str) -> str:
    if len(text) >= 2 and text[0] in "'\"`" and text[-1] == text[0]:
        return text[1:-1]
    return text


def _annotation_text(node: Any, source: bytes) -> str:
    """Type text of a ``: T`` annotation without the colon."""
    text = _text(node, source).strip()
    if text.startswith(":"):
        return text[1:].strip()
    return text


def _has_child(node: Any, child_type: str) -> bool:
    return any(child.type == child_type for child in node.children)


def _accessibility(node: Any, source: bytes) -> str | None:
    for child in node.children:
        if child.type == "accessibility_modifier":
            return _text(child, source).strip()
    return None


def _line_range(node: Any) -> tuple[int, int]:
    return node.start_point[0] + 1, node.end_point[0] + 1


def _is_exported(node: Any) -> bool:
    """Whether the node itself is the declaration of an export statement.

    ``export const f = () => ...`` exports the variable, not the function node.
    """
    parent = node.parent
    return parent is not None and parent.type == "export_statement"


def _function_initializer(node: Any) -> Any:
    """The function-valued initializer of a variable declarator, if any."""
    value = node.child_by_field_name("value")
    if value is not None and value.type in INITIALIZER_FUNCTION_TYPES:
        return value
    return None


def _is_constructor(node: Any, source: bytes) -> bool:
    if node.type != "method_definition":
        return False
    name = node.child_by_field_name("name")
    return name is not None and _text(name, source) == "constructor"


def _first_error_line(root: Any) -> int | None:
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            return node.start_point[0] + 1
        if node.has_error:
            stack.extend(reversed(node.children))
    return None


class StructuralAnalyzer(BaseSourceAnalyzer):
    """Extracts structural records from a tree-sitter syntax tree."""

    def __init__(self, nested_functions: str = "include") -> None:
        """Initialize the analyzer.

        Args:
            nested_functions: ``"include"`` to count branches of nested
                functions toward their enclosing function, ``"exclude"`` to
                stop at nested function boundaries
        """
        if nested_functions not in NESTED_FUNCTION_POLICIES:
            raise ValueError(
                f"nested_functions must be one of {NESTED_FUNCTION_POLICIES}, "
                f"got {nested_functions!r}"
            )
        self.include_nested = nested_functions == "include"

    @property
    def name(self) -> str:
        return "structural"

    def parse(self, unit: SourceUnit) -> Any:
        """Parse a source unit into a tree-sitter tree."""
        # One parser per call keeps concurrent analyses independent
        parser = tree_sitter.Parser(get_language(unit.dialect))
        return parser.parse(unit.text.encode("utf-8"))

    def analyze(self, unit: SourceUnit) -> StructuralResult | FallbackResult:
        """Parse a file and collect its structural records.

        Args:
            unit: The file to analyze

        Returns:
            StructuralResult on success, FallbackResult when the file could
            not be parsed cleanly
        """
        try:
            tree = self.parse(unit)
        except Exception as e:
            logger.warning(f"Parser failed for {unit.relative_path}: {e}")
            return FallbackResult(reason=f"Parser error: {e}")

        if tree.root_node.has_error:
            line = _first_error_line(tree.root_node)
            location = f" near line {line}" if line else ""
            logger.debug(f"Syntax error in {unit.relative_path}{location}")
            return FallbackResult(reason=f"Syntax error{location}")

        source = unit.text.encode("utf-8")
        result = StructuralResult(tree=tree)
        self._walk(tree.root_node, source, result)
        return result

    def _walk(self, root: Any, source: bytes, result: StructuralResult) -> None:
        stack = [root]
        while stack:
            node = stack.pop()
            node_type = node.type

            if node_type in RECORDED_FUNCTION_TYPES:
                if not _is_constructor(node, source):
                    result.functions.append(self._function_record(node, source))
            elif node_type == "variable_declarator":
                # The initializer is recorded again as anonymous when the walk reaches it
                initializer = _function_initializer(node)
                name_node = node.child_by_field_name("name")
                if initializer is not None and name_node is not None:
                    result.functions.append(
                        self._function_record(initializer, source, _text(name_node, source))
                    )
            elif node_type in CLASS_NODE_TYPES:
                result.classes.append(self._class_record(node, source))
            elif node_type == "interface_declaration":
                result.interfaces.append(self._interface_record(node, source))
            elif node_type == "type_alias_declaration":
                result.types.append(self._type_alias_record(node, source))
            elif node_type == "import_statement":
                record = self._import_record(node, source)
                if record is not None:
                    result.imports.append(record)
            elif node_type == "export_statement":
                export = self._export_record(node, source)
                if export is not None:
                    result.exports.append(export)

            stack.extend(reversed(node.named_children))

    # ------------------------------------------------------------------
    # Functions

    def _function_name(self, node: Any, source: bytes) -> str:
        name_node = node.child_by_field_name("name")
        if name_node is not None:
            return _text(name_node, source)
        return "<anonymous>"

    def _parameters(self, node: Any, source: bytes) -> list[ParameterRecord]:
        single = node.child_by_field_name("parameter")
        if single is not None:
            return [ParameterRecord(name=_text(single, source))]

        params_node = node.child_by_field_name("parameters")
        if params_node is None:
            return []

        records: list[ParameterRecord] = []
        for param in params_node.named_children:
            if param.type not in ("required_parameter", "optional_parameter"):
                continue
            pattern = param.child_by_field_name("pattern")
            type_node = param.child_by_field_name("type")
            value = param.child_by_field_name("value")
            records.append(
                ParameterRecord(
                    name=self._pattern_name(pattern, source) if pattern else _text(param, source),
                    type=_annotation_text(type_node, source) if type_node else "any",
                    optional=param.type == "optional_parameter",
                    default_value=_text(value, source) if value else None,
                )
            )
        return records

    def _pattern_name(self, pattern: Any, source: bytes) -> str:
        if pattern.type == "rest_pattern" and pattern.named_children:
            return _text(pattern.named_children[0], source)
        return _text(pattern, source)

    def _function_record(self, node: Any, source: bytes, name: str | None = None) -> FunctionRecord:
        return_type = node.child_by_field_name("return_type")
        start_line, end_line = _line_range(node)
        return FunctionRecord(
            name=name or self._function_name(node, source),
            parameters=self._parameters(node, source),
            return_type=_annotation_text(return_type, source) if return_type else "unknown",
            is_async=_has_child(node, "async"),
            is_exported=_is_exported(node),
            complexity=calculate_node_complexity(node, self.include_nested),
            start_line=start_line,
            end_line=end_line,
        )

    # ------------------------------------------------------------------
    # Classes, interfaces, type aliases

    def _class_record(self, node: Any, source: bytes) -> ClassRecord:
        name_node = node.child_by_field_name("name")
        heritage: list[HeritageClause] = []
        for child in node.named_children:
            if child.type != "class_heritage":
                continue
            for clause in child.named_children:
                if clause.type == "extends_clause":
                    heritage.append(
                        HeritageClause(kind="extends", types=self._extends_types(clause, source))
                    )
                elif clause.type == "implements_clause":
                    heritage.append(
                        HeritageClause(
                            kind="implements",
                            types=[_text(t, source) for t in clause.named_children],
                        )
                    )

        methods: list[FunctionRecord] = []
        properties: list[PropertyRecord] = []
        body = node.child_by_field_name("body")
        members = body.named_children if body is not None else []
        for member in members:
            if member.type in ("method_definition", "abstract_method_signature"):
                methods.append(self._function_record(member, source))
            elif member.type == "public_field_definition":
                properties.append(self._property_record(member, source))

        start_line, end_line = _line_range(node)
        return ClassRecord(
            name=_text(name_node, source) if name_node else "<anonymous>",
            is_exported=_is_exported(node),
            is_abstract=node.type == "abstract_class_declaration",
            heritage=heritage,
            methods=methods,
            properties=properties,
            start_line=start_line,
            end_line=end_line,
        )

    def _extends_types(self, clause: Any, source: bytes) -> list[str]:
        types: list[str] = []
        for child in clause.named_children:
            if child.type == "type_arguments" and types:
                types[-1] += _text(child, source)
            else:
                types.append(_text(child, source))
        return types

    def _property_record(self, node: Any, source: bytes) -> PropertyRecord:
        name_node = node.child_by_field_name("name")
        type_node = node.child_by_field_name("type")
        accessibility = _accessibility(node, source)
        return PropertyRecord(
            name=_text(name_node, source) if name_node else "<unknown>",
            type=_annotation_text(type_node, source) if type_node else "any",
            is_static=_has_child(node, "static"),
            is_private=accessibility == "private",
            is_protected=accessibility == "protected",
            is_readonly=_has_child(node, "readonly"),
        )

    def _interface_record(self, node: Any, source: bytes) -> InterfaceRecord:
        name_node = node.child_by_field_name("name")
        heritage = [
            HeritageClause(types=[_text(t, source) for t in child.named_children])
            for child in node.named_children
            if child.type == "extends_type_clause"
        ]

        properties: list[PropertySignature] = []
        methods: list[MethodSignature] = []
        body = node.child_by_field_name("body")
        members = body.named_children if body is not None else []
        for member in members:
            if member.type == "property_signature":
                member_name = member.child_by_field_name("name")
                type_node = member.child_by_field_name("type")
                properties.append(
                    PropertySignature(
                        name=_text(member_name, source) if member_name else "<unknown>",
                        type=_annotation_text(type_node, source) if type_node else "any",
                        optional=_has_child(member, "?"),
                    )
                )
            elif member.type == "method_signature":
                member_name = member.child_by_field_name("name")
                return_type = member.child_by_field_name("return_type")
                methods.append(
                    MethodSignature(
                        name=_text(member_name, source) if member_name else "<unknown>",
                        parameters=[
                            SignatureParameter(name=p.name, type=p.type, optional=p.optional)
                            for p in self._parameters(member, source)
                        ],
                        return_type=(
                            _annotation_text(return_type, source) if return_type else "unknown"
                        ),
                    )
                )

        start_line, end_line = _line_range(node)
        return InterfaceRecord(
            name=_text(name_node, source) if name_node else "<anonymous>",
            is_exported=_is_exported(node),
            heritage=heritage,
            properties=properties,
            methods=methods,
            start_line=start_line,
            end_line=end_line,
        )

    def _type_alias_record(self, node: Any, source: bytes) -> TypeAliasRecord:
        name_node = node.child_by_field_name("name")
        value = node.child_by_field_name("value")
        start_line, end_line = _line_range(node)
        return TypeAliasRecord(
            name=_text(name_node, source) if name_node else "<anonymous>",
            type=_text(value, source) if value else "unknown",
            is_exported=_is_exported(node),
            start_line=start_line,
            end_line=end_line,
        )

    # ------------------------------------------------------------------
    # Imports and exports

    def _specifier_binding(self, node: Any, source: bytes) -> ImportBinding:
        """Named binding; ``name`` is the local name, ``alias`` the original."""
        original = node.child_by_field_name("name")
        renamed = node.child_by_field_name("alias")
        if renamed is not None:
            return ImportBinding(
                type="named",
                name=_text(renamed, source),
                alias=_text(original, source) if original else None,
            )
        return ImportBinding(type="named", name=_text(original or node, source))

    def _import_record(self, node: Any, source: bytes) -> ImportRecord | None:
        source_node = node.child_by_field_name("source")
        if source_node is None:
            return None

        bindings: list[ImportBinding] = []
        for child in node.named_children:
            if child.type != "import_clause":
                continue
            for part in child.named_children:
                if part.type == "identifier":
                    bindings.append(ImportBinding(type="default", name=_text(part, source)))
                elif part.type == "namespace_import":
                    identifiers = [c for c in part.named_children if c.type == "identifier"]
                    if identifiers:
                        bindings.append(
                            ImportBinding(type="namespace", name=_text(identifiers[0], source))
                        )
                elif part.type == "named_imports":
                    for spec in part.named_children:
                        if spec.type == "import_specifier":
                            bindings.append(self._specifier_binding(spec, source))

        return ImportRecord(module_specifier=_unquote(_text(source_node, source)), imports=bindings)

    def _export_record(self, node: Any, source: bytes) -> ExportRecord | None:
        if node.child_by_field_name("declaration") is not None:
            return None

        source_node = node.child_by_field_name("source")
        clause = next((c for c in node.named_children if c.type == "export_clause"), None)
        if clause is not None or source_node is not None:
            exports = []
            if clause is not None:
                exports = [
                    self._specifier_binding(spec, source)
                    for spec in clause.named_children
                    if spec.type == "export_specifier"
                ]
            return ExportRecord(
                type="declaration",
                module_specifier=_unquote(_text(source_node, source)) if source_node else None,
                exports=exports,
            )

        value = node.child_by_field_name("value")
        if value is not None:
            return ExportRecord(type="assignment", is_default=True, expression=_text(value, source))

        # export = expression
        seen_equals = False
        for child in node.children:
            if child.type == "=":
                seen_equals = True
            elif seen_equals and child.is_named:
                return ExportRecord(
                    type="assignment", is_default=False, expression=_text(child, source)
                )
        return None
