"""
Static configuration data for the Cairn loader.
This includes content-format selection, operator mappings and the friendly
names used in syntax error messages.
"""

# The content format of a document is chosen from its *resolved* path only.
# Anything not listed here is parsed with the Cairn grammar.
STRUCTURED_FORMAT_SUFFIXES = {
    ".json": "json",
    ".yaml": "yaml",
    ".yml": "yaml",
}

BINARY_OPERATORS = {
    "+": "add",
    "-": "subtract",
    "*": "multiply",
    "/": "divide",
    "%": "modulo",
    "++": "concat",
    "&": "merge",
    "&&": "and",
    "||": "or",
    "==": "eq",
    "!=": "ne",
    "<": "lt",
    "<=": "le",
    ">": "gt",
    ">=": "ge",
}

UNARY_OPERATORS = {"-": "negate", "!": "not"}

# Reverse mapping, used to show the operator as written in error messages.
OPERATOR_SYMBOLS = {name: symbol for symbol, name in {**BINARY_OPERATORS, **UNARY_OPERATORS}.items()}

FRIENDLY_TOKEN_NAMES = {
    "NAME": "a name",
    "NUMBER": "a number",
    "STRING": "a string in double quotes",
    "TRUE": "'true'",
    "FALSE": "'false'",
    "NULL": "'null'",
    "LET": "the 'let' keyword",
    "FUN": "the 'fun' keyword",
    "IF": "the 'if' keyword",
    "IMPORT": "the 'import' keyword",
    "IN": "the 'in' keyword",
    "THEN": "the 'then' keyword",
    "ELSE": "the 'else' keyword",
    "EQUAL": "an equals sign '='",
    "COMMA": "a comma ','",
    "DOT": "a dot '.'",
    "LPAR": "an opening parenthesis '('",
    "RPAR": "a closing parenthesis ')'",
    "LBRACE": "an opening brace '{'",
    "RBRACE": "a closing brace '}'",
    "LSQB": "an opening bracket '['",
    "RSQB": "a closing bracket ']'",
    "MERGE": "the merge operator '&'",
    "OR": "the '||' operator",
    "AND": "the '&&' operator",
    "COMPARE_OP": "a comparison operator",
    "SUM_OP": "'+', '-' or '++'",
    "PRODUCT_OP": "'*', '/' or '%'",
    "UNARY_OP": "'-' or '!'",
    "$END": "the end of the file",
}

# The types reported in evaluation errors, by Python type name.
VALUE_TYPE_NAMES = {
    "NoneType": "null",
    "bool": "bool",
    "int": "number",
    "float": "number",
    "str": "string",
    "list": "array",
    "tuple": "array",
    "dict": "record",
    "bytes": "bytes",
    "bytearray": "bytes",
    "Closure": "function",
}
