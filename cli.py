import logging
import sys
import traceback

from errors import MiniBlocksError
from lexer import Lexer
from runner import build_structure, compile_program


# Simple AST printer (so you can SEE what the parser built)
def ast_to_dict(node):
    if node is None:
        return None

    t = node.__class__.__name__
    d = {"type": t}

    if t in ("Program", "Block"):
        d["statements"] = [ast_to_dict(s) for s in node.statements]
    elif t == "VarDecl":
        d["name"] = node.name
        d["initializer"] = ast_to_dict(node.initializer)
    elif t == "ExprStmt":
        d["expr"] = ast_to_dict(node.expr)
    elif t == "If":
        d["condition"] = ast_to_dict(node.condition)
        d["then_branch"] = ast_to_dict(node.then_branch)
        d["else_branch"] = ast_to_dict(node.else_branch)
    elif t == "While":
        d["condition"] = ast_to_dict(node.condition)
        d["body"] = ast_to_dict(node.body)
    elif t == "SetBlock":
        d["x"] = ast_to_dict(node.x)
        d["y"] = ast_to_dict(node.y)
        d["z"] = ast_to_dict(node.z)
        d["block"] = ast_to_dict(node.block)
    elif t == "Literal":
        d["value"] = node.value
    elif t == "Variable":
        d["name"] = node.name
    elif t == "Assign":
        d["name"] = node.name
        d["value"] = ast_to_dict(node.value)
    elif t == "Unary":
        d["op"] = node.op
        d["operand"] = ast_to_dict(node.operand)
    elif t == "Binary":
        d["op"] = node.op
        d["left"] = ast_to_dict(node.left)
        d["right"] = ast_to_dict(node.right)
    elif t == "Conditional":
        d["condition"] = ast_to_dict(node.condition)
        d["then_expr"] = ast_to_dict(node.then_expr)
        d["else_expr"] = ast_to_dict(node.else_expr)
    elif t == "Grouping":
        d["expr"] = ast_to_dict(node.expr)
    else:
        d["raw"] = str(node)

    return d


def pretty(obj, indent=0):
    sp = "  " * indent
    if isinstance(obj, dict):
        lines = []
        for k, v in obj.items():
            if isinstance(v, (dict, list)):
                lines.append(f"{sp}{k}:")
                lines.append(pretty(v, indent + 1))
            else:
                lines.append(f"{sp}{k}: {v}")
        return "\n".join(lines)
    if isinstance(obj, list):
        lines = []
        for item in obj:
            lines.append(f"{sp}-")
            lines.append(pretty(item, indent + 1))
        return "\n".join(lines)
    return f"{sp}{obj}"


def read_source(path):
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def report(e, debug):
    if debug:
        traceback.print_exc()
    else:
        print(str(e))
    sys.exit(1)


def cmd_tokens(path, debug=False):
    try:
        tokens = Lexer(read_source(path)).tokenize()
    except (OSError, MiniBlocksError) as e:
        report(e, debug)

    for tok in tokens:
        print(f"  {tok.line:4d}:{tok.column:<4d} {tok!r}")


def cmd_parse(path, debug=False):
    try:
        program = compile_program(read_source(path))
    except (OSError, MiniBlocksError) as e:
        report(e, debug)

    print(pretty(ast_to_dict(program)))


def cmd_run(path, debug=False, max_steps=None):
    try:
        result = build_structure(read_source(path), print, max_steps=max_steps)
    except (OSError, MiniBlocksError) as e:
        report(e, debug)

    print(f"# {result.emitted} blocks")


def usage():
    print("Usage:")
    print("  python cli.py tokens <file.mb>")
    print("  python cli.py parse <file.mb>")
    print("  python cli.py run <file.mb> [--max-steps N]")
    print("  (optional) --debug to show Python traceback and debug logging")
    sys.exit(1)


def main(argv=None):
    args = list(sys.argv[1:] if argv is None else argv)

    debug = False
    if "--debug" in args:
        debug = True
        args.remove("--debug")

    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    max_steps = None
    if "--max-steps" in args:
        i = args.index("--max-steps")
        if i + 1 >= len(args):
            usage()
        try:
            max_steps = int(args[i + 1])
        except ValueError:
            print(f"--max-steps expects an integer, got {args[i + 1]}")
            sys.exit(1)
        del args[i:i + 2]

    if len(args) != 2:
        usage()

    cmd, path = args

    if cmd == "tokens":
        cmd_tokens(path, debug=debug)
    elif cmd == "parse":
        cmd_parse(path, debug=debug)
    elif cmd == "run":
        cmd_run(path, debug=debug, max_steps=max_steps)
    else:
        print(f"Unknown command: {cmd}")
        sys.exit(1)


if __name__ == "__main__":
    main()
