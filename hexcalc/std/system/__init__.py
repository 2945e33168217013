from .services import FileSystem, IOCode, System, check, io_failure
from hexcalc.ast import FuncDef, to_source
from hexcalc.ast_json import ast_from_obj, ast_to_obj, value_from_obj, value_to_obj
from hexcalc.builtin_function import BuiltinFunction, UserFunction
from hexcalc.environment import Environment
from hexcalc.errors import EvalError, ErrorKind
from hexcalc.types import Kind, Value, VOID, to_string, type_name
from typing import List
import json

CHUNK_SIZE = 512


def _name_arg(fn_name: str, value: Value) -> str:
    if value.kind is not Kind.STR:
        raise EvalError(ErrorKind.TYPE_MISMATCH, f'{fn_name} expects a name string, got {type_name(value)}')
    return value.payload


def dump_environment(env: Environment) -> bytes:
    doc = {
        "variables": {name: value_to_obj(value) for name, value in env.variables()},
        "functions": {
            name: ast_to_obj(FuncDef(func.name, func.params, func.body))
            for name, func in env.functions()
        },
    }
    return json.dumps(doc).encode('utf-8')


def merge_environment(env: Environment, data: bytes):
    doc = json.loads(data.decode('utf-8'))
    for name, obj in doc.get("variables", {}).items():
        env.persistent.set(name, value_from_obj(obj))
    for obj in doc.get("functions", {}).values():
        node = ast_from_obj(obj)
        env.define_function(UserFunction(node.name, node.params, node.body))


def populate_system_environment(env: Environment, system: System) -> Environment:
        def emit(text: str):
            check(system.emit(text), 'print')

        def std_print(args: List[Value]) -> Value:
            emit(''.join(to_string(a) for a in args) + '\n')
            return VOID

        def std_clear(args: List[Value]) -> Value:
            check(system.clear(), 'clear')
            return VOID

        def std_save(args: List[Value]) -> Value:
            name = _name_arg('save', args[0])
            data = dump_environment(env)
            check(system.open(name, 'w'), f'save {name}')
            try:
                for start in range(0, len(data), CHUNK_SIZE):
                    check(system.write(data[start:start + CHUNK_SIZE]), f'save {name}')
            finally:
                system.close()
            return VOID

        def std_load(args: List[Value]) -> Value:
            name = _name_arg('load', args[0])
            check(system.open(name, 'r'), f'load {name}')
            chunks: List[bytes] = []
            try:
                while True:
                    n, chunk = system.read(CHUNK_SIZE)
                    check(n, f'load {name}')
                    if n == 0:
                        break
                    chunks.append(chunk)
            finally:
                system.close()
            try:
                merge_environment(env, b''.join(chunks))
            except (ValueError, KeyError, AttributeError, TypeError) as e:
                raise io_failure(IOCode.READ_FAIL, f'load {name}') from e
            return VOID

        def std_files(args: List[Value]) -> Value:
            code, names = system.list_files()
            check(code, 'files')
            for name in names:
                emit(name + '\n')
            return VOID

        def std_vars(args: List[Value]) -> Value:
            for name, value in env.variables():
                shown = f'"{value.payload}"' if value.kind is Kind.STR else to_string(value)
                emit(f'{name} = {shown}\n')
            return VOID

        def std_funcs(args: List[Value]) -> Value:
            for name, func in env.functions():
                emit(to_source(FuncDef(name, func.params, func.body)) + '\n')
            return VOID

        def std_delvar(args: List[Value]) -> Value:
            name = _name_arg('delvar', args[0])
            if not isinstance(env.persistent.values.get(name), Value) or not env.remove(name):
                raise EvalError(ErrorKind.UNDEFINED_NAME, f'no variable named {name}')
            return VOID

        def std_delfunc(args: List[Value]) -> Value:
            name = _name_arg('delfunc', args[0])
            if not isinstance(env.persistent.values.get(name), UserFunction):
                raise EvalError(ErrorKind.UNDEFINED_NAME, f'no user function named {name}')
            env.remove(name)
            return VOID

        def std_clvars(args: List[Value]) -> Value:
            env.clear_variables()
            return VOID

        def std_clfuncs(args: List[Value]) -> Value:
            env.clear_functions()
            return VOID

        def std_help(args: List[Value]) -> Value:
            builtins = sorted(
                name for name, binding in env.persistent.values.items()
                if isinstance(binding, BuiltinFunction)
            )
            constants = sorted(
                name for name, binding in env.persistent.values.items()
                if isinstance(binding, Value) and env.persistent.consts.get(name)
            )
            emit('functions: ' + ', '.join(builtins) + '\n')
            emit('constants: ' + ', '.join(constants) + '\n')
            emit('define functions with name(a, b) -> expr, the last result is ans\n')
            return VOID

        env.declare_builtin('print', BuiltinFunction('print', None, std_print))
        env.declare_builtin('clear', BuiltinFunction('clear', 0, std_clear))
        env.declare_builtin('save', BuiltinFunction('save', 1, std_save))
        env.declare_builtin('load', BuiltinFunction('load', 1, std_load))
        env.declare_builtin('files', BuiltinFunction('files', 0, std_files))
        env.declare_builtin('vars', BuiltinFunction('vars', 0, std_vars))
        env.declare_builtin('funcs', BuiltinFunction('funcs', 0, std_funcs))
        env.declare_builtin('delvar', BuiltinFunction('delvar', 1, std_delvar))
        env.declare_builtin('delfunc', BuiltinFunction('delfunc', 1, std_delfunc))
        env.declare_builtin('clvars', BuiltinFunction('clvars', 0, std_clvars))
        env.declare_builtin('clfuncs', BuiltinFunction('clfuncs', 0, std_clfuncs))
        env.declare_builtin('help', BuiltinFunction('help', 0, std_help))

        return env


__all__ = [
    'FileSystem',
    'IOCode',
    'System',
    'populate_system_environment',
]
