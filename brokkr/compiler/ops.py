"""A module containing basic operator mappings."""
FLOAT_LOOKUP = {
    "+": lambda ir_builder, *args: ir_builder.fadd(*args),
    "*": lambda ir_builder, *args: ir_builder.fmul(*args),
}

INT_LOOKUP = {
    "+": lambda ir_builder, *args: ir_builder.add(*args),
    "*": lambda ir_builder, *args: ir_builder.mul(*args),
}


def lookup(op: str, is_float: bool):
    return (FLOAT_LOOKUP if is_float else INT_LOOKUP)[op]
