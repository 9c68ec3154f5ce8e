from errors import MiniBlocksRuntimeError


class Environment:
    """One lexical scope. Blocks get a child of the scope they were entered from."""

    def __init__(self, enclosing=None):
        self.enclosing = enclosing
        self.values = {}

    def define(self, name: str, value) -> None:
        # declarations always land in the innermost scope, shadowing outer ones
        self.values[name] = value

    def get(self, name: str):
        env = self
        while env is not None:
            if name in env.values:
                return env.values[name]
            env = env.enclosing
        raise MiniBlocksRuntimeError(f"Undefined variable '{name}'")

    def assign(self, name: str, value) -> None:
        env = self
        while env is not None:
            if name in env.values:
                env.values[name] = value
                return
            env = env.enclosing
        raise MiniBlocksRuntimeError(f"Undefined variable '{name}'")
