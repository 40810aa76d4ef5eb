# celestemods

Tools for working with Celeste mods as a map editor sees them:

- `celestemods.expression`: a small expression language used in object
  configuration files. `parse_expression` turns text into an `Expression`
  tree, and `Expression.evaluate(env)` computes a number (`float`) or a
  string (`str`) from a mapping of names to values.
- `celestemods.config`, `celestemods.drawing`, `celestemods.object_config`:
  entity, trigger and styleground configuration (`EntityConfig`,
  `TriggerConfig`, `StylegroundConfig`) with hitboxes, drawing instructions,
  attribute descriptions and templates, loaded from and saved to YAML.
- `celestemods.everest_yaml`: reading and writing `everest.yaml` module
  metadata (`EverestYaml`, `EverestModuleVersion`, `celeste_module_yaml`).
- `celestemods.entity_env`: building evaluation environments for a placed
  entity and its nodes (`make_entity_env`, `make_node_env`).
- `celestemods.selectable`: palette entries for tiles, entities, triggers
  and decals (`TileSelectable`, `EntitySelectable`, `TriggerSelectable`,
  `DecalSelectable`).
- `celestemods.auto_saver`: `AutoSaver`, which runs a save function
  whenever a mutable borrow of its value ends.

## Installation

```
pip install .
```

## Expressions

```python
from celestemods.expression import parse_expression

expr = parse_expression("match x + 1 { 1 => 'one', 2 => Upper('two'), _ => x * 2 }")
print(expr.evaluate({"x": 1.0}))   # TWO
print(expr.evaluate({"x": 5.0}))   # 10.0
print(parse_expression("?y").evaluate({}))  # 0.0, because "y" is not defined
```

Numbers are floats, strings may use single or double quotes, and hexadecimal
literals such as `0x1F` are accepted. Operators, from lowest to highest
precedence: comparisons (`< > <= >= == !=`), `+ -`, `* / %`, and the prefix
operators `-` and `?` (does the operand evaluate without error). `+` joins
strings when either side is a string. The built-in functions are `Lower` and
`Upper`. A `match` expression needs exactly one `_` arm.

Errors during evaluation raise `ExpressionError`. Malformed text raises
`ExpressionSyntaxError`, a subclass of it. `str(expr)` prints an expression
back in a form that `parse_expression` reads again.

## Entity configuration

```python
from celestemods.object_config import EntityConfig

with open("Arborio/entities/spikes.yaml") as f:
    config = EntityConfig.from_yaml(f.read())
print(config.entity_name, config.minimum_size_x)
print(config.to_yaml())
```

`TriggerConfig` and `StylegroundConfig` work the same way. Invalid documents
raise `ConfigError`. `EntityConfig.new(name)` makes an empty configuration,
and `default_template()` gives a template named after the entity or trigger.

## Entity environments

The entity passed in is any object with numeric `x`, `y`, `width` and
`height`, an `attributes` mapping, and `nodes`, a sequence of `(x, y)` pairs.

```python
from types import SimpleNamespace
from celestemods.entity_env import make_entity_env, make_node_env
from celestemods.expression import parse_expression

entity = SimpleNamespace(x=8, y=16, width=24, height=8,
                         attributes={"flipped": True}, nodes=[(40, 16)])
env = make_entity_env(entity)
print(parse_expression("lastnodex - x").evaluate(env))  # 32.0
node_env = make_node_env(entity, env, 0)
print(node_env["prevnodexorbase"])                      # 8.0
```

## Module metadata

```python
from celestemods.everest_yaml import EverestYaml

meta = EverestYaml.from_folder("Mods/MyMod")
print(meta.name, meta.version)
meta.save("Mods/MyMod")
```

`from_folder` looks for `everest.yaml`, then `everest.yml`. A missing file
raises `EverestYamlMissingError`, malformed YAML raises
`EverestYamlParseError`, and a document that does not hold exactly one
module raises `NotOneEntryError`; all derive from `EverestYamlError`.

## Auto-saving values

```python
from celestemods.auto_saver import AutoSaver

settings = AutoSaver({"zoom": 1.0}, lambda value: print("saving", value))
with settings.borrow_mut() as ref:
    ref.value["zoom"] = 2.0
# prints: saving {'zoom': 2.0}
```

## What this package does not do

It does not scan a game folder for mods, open zipped modules, watch for
changes, merge several modules' configuration into one palette, read map
files or load graphics and tilesets. It works on configuration and metadata
that the caller hands to it, and on `everest.yaml` files in unpacked folders.

## Running the tests

```
pip install .[test]
pytest
```