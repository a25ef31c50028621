"""
Command loop for xaiflow.
Pick a dataset, choose target and features, train, then fill in a model's
inputs and get a prediction with its explanation.
"""

import asyncio
import shlex
import sys
from typing import Callable, Dict, List, Optional

from xaiflow.api import Workbench
from xaiflow.config import ClientConfig
from xaiflow.exceptions import ModelServiceError, WorkflowValidationError
from xaiflow.schemas import ExplainedPrediction


PROMPT = "xaiflow › "


def run_repl(config: Optional[ClientConfig] = None, workbench: Optional[Workbench] = None) -> None:
    """Run the interactive loop against the service described by ``config`` (default: environment)."""
    wb = workbench or Workbench(config or ClientConfig.from_env())
    loop = asyncio.new_event_loop()
    try:
        _print_banner(wb, loop)
        while True:
            try:
                line = input(PROMPT).strip()
            except EOFError:
                print()
                break
            if not line:
                continue
            if line.lower() in ("quit", "exit", "q"):
                break
            try:
                handle_line(line, wb, loop)
            except ModelServiceError as e:
                print(f"Error: {e.message}", file=sys.stderr)
            except (WorkflowValidationError, KeyError) as e:
                print(f"Error: {e}", file=sys.stderr)
            except KeyboardInterrupt:
                print("\nInterrupted. Type 'quit' to exit.")
                continue
    finally:
        loop.run_until_complete(loop.shutdown_default_executor())
        loop.close()


def _print_banner(wb: Workbench, loop: asyncio.AbstractEventLoop) -> None:
    print()
    print("  ----------------------------------------")
    print("  xaiflow")
    print("  Train models, predict, explain.")
    print("  ----------------------------------------")
    print()
    try:
        loop.run_until_complete(wb.refresh())
        print(f"  ✓  Connected ({len(wb.datasets)} datasets, {len(wb.models)} models)")
    except ModelServiceError as e:
        print(f"  ✗  Service not reachable: {e.message}")
        print("      Set XAIFLOW_API_URL and XAIFLOW_TOKEN to a running service.")
    print("  Type 'help' for commands.")
    print()


def handle_line(line: str, wb: Workbench, loop: asyncio.AbstractEventLoop) -> None:
    """Parse one input line and run the matching command."""
    try:
        parts = shlex.split(line)
    except ValueError as e:
        print(f"Could not parse input: {e}")
        return
    name, args = parts[0].lower(), parts[1:]
    command = COMMANDS.get(name)
    if command is None:
        print(f"Unknown command: {name}. Type 'help' for commands.")
        return
    command(args, wb, loop)


def _cmd_help(args: List[str], wb: Workbench, loop) -> None:
    print("  Training:")
    print("    datasets                 list uploaded datasets")
    print("    upload <file.csv>        upload a dataset")
    print("    use <dataset id>         select a dataset")
    print("    columns                  show columns, target and selected features")
    print("    target <column>          choose the target variable")
    print("    toggle <column> ...      select / deselect features ('all' selects every one)")
    print("    name <model name>        name the model")
    print("    type <classification|regression>")
    print("    train                    train the model")
    print("  Prediction:")
    print("    models                   list trained models")
    print("    model <model id>         select a model")
    print("    set <feature>=<value>    fill in an input value")
    print("    fields                   show the input form")
    print("    predict                  predict and explain")
    print("  Account / housekeeping:")
    print("    login <user> <password>  sign in and use the returned token")
    print("    delete dataset <id>      delete a dataset")
    print("    delete model <id>        delete a trained model")
    print("  quit")


def _cmd_datasets(args: List[str], wb: Workbench, loop) -> None:
    datasets = loop.run_until_complete(wb.refresh_datasets())
    if not datasets:
        print("No datasets. Upload one with: upload path/to/file.csv")
        return
    for d in datasets:
        print(f"  [{d.id}] {d.label()}")


def _cmd_upload(args: List[str], wb: Workbench, loop) -> None:
    if len(args) != 1:
        print("Usage: upload path/to/file.csv")
        return
    dataset = loop.run_until_complete(wb.upload(args[0]))
    print(f"Uploaded [{dataset.id}] {dataset.label()}")


def _cmd_use(args: List[str], wb: Workbench, loop) -> None:
    dataset_id = _parse_id(args, "use <dataset id>")
    if dataset_id is None:
        return
    loop.run_until_complete(wb.features.set_dataset(dataset_id))
    _print_notices(wb.features.notices)
    if wb.features.schema is not None:
        _cmd_columns([], wb, loop)


def _cmd_columns(args: List[str], wb: Workbench, loop) -> None:
    fs = wb.features
    if fs.schema is None:
        print("Select a dataset first: use <dataset id>")
        return
    print(f"  Columns: {', '.join(fs.headers)}")
    print(f"  Target: {fs.target_variable or '-'}")
    if fs.target_variable:
        selected = set(fs.selected_features())
        marks = [f"[{'x' if f in selected else ' '}] {f}" for f in fs.available_features()]
        print("  Features:")
        for m in marks:
            print(f"    {m}")
    else:
        print("  Choose a target to select features: target <column>")


def _cmd_target(args: List[str], wb: Workbench, loop) -> None:
    if len(args) != 1:
        print("Usage: target <column>")
        return
    wb.features.set_target(args[0])
    _cmd_columns([], wb, loop)


def _cmd_toggle(args: List[str], wb: Workbench, loop) -> None:
    if not args:
        print("Usage: toggle <column> ... | toggle all")
        return
    if args == ["all"]:
        wb.features.select_all()
    else:
        for column in args:
            wb.features.toggle_feature(column)
    print(f"  Selected features ({len(wb.features.selected_features())}): {', '.join(wb.features.selected_features())}")


def _cmd_name(args: List[str], wb: Workbench, loop) -> None:
    wb.training.set_model_name(" ".join(args))


def _cmd_type(args: List[str], wb: Workbench, loop) -> None:
    if len(args) != 1:
        print("Usage: type classification|regression")
        return
    wb.training.set_model_type(args[0])


def _cmd_train(args: List[str], wb: Workbench, loop) -> None:
    missing = wb.training.missing_fields()
    if missing:
        print(f"  Missing: {', '.join(missing)}")
    else:
        print("Training…")
    model = loop.run_until_complete(wb.training.submit())
    _print_notices(wb.training.notices)
    if model is not None:
        print(f"  {model.summary()}")


def _cmd_models(args: List[str], wb: Workbench, loop) -> None:
    models = loop.run_until_complete(wb.refresh_models())
    if not models:
        print("No trained models yet.")
        return
    for m in models:
        print(f"  [{m.id}] {m.summary()}")


def _cmd_model(args: List[str], wb: Workbench, loop) -> None:
    model_id = _parse_id(args, "model <model id>")
    if model_id is None:
        return
    model = loop.run_until_complete(wb.predictor.set_model(model_id))
    _print_notices(wb.predictor.notices)
    if model is not None:
        print(f"  {model.summary()}")
        if model.training_date:
            print(f"  Trained: {model.training_date.date().isoformat()}")
        _cmd_fields([], wb, loop)


def _cmd_set(args: List[str], wb: Workbench, loop) -> None:
    if not args:
        print("Usage: set <feature>=<value> ...")
        return
    for pair in args:
        feature, sep, value = pair.partition("=")
        if not sep:
            print(f"Expected feature=value, got: {pair}")
            return
        wb.predictor.set_input_value(feature.strip(), value.strip())


def _cmd_fields(args: List[str], wb: Workbench, loop) -> None:
    fields = wb.predictor.input_fields()
    if not fields:
        print("Select a model first: model <model id>")
        return
    for f in fields:
        print(f"    {f.name} = {f.value if f.filled else '<required>'}")


def _cmd_predict(args: List[str], wb: Workbench, loop) -> None:
    result = loop.run_until_complete(wb.predictor.submit())
    _print_notices(wb.predictor.notices)
    if result is not None:
        _print_prediction(result)


def _cmd_login(args: List[str], wb: Workbench, loop) -> None:
    if len(args) != 2:
        print("Usage: login <user> <password>")
        return
    loop.run_until_complete(wb.login(args[0], args[1]))
    print(f"  ✓  Logged in as {args[0]}")
    loop.run_until_complete(wb.refresh())


def _cmd_delete(args: List[str], wb: Workbench, loop) -> None:
    if len(args) != 2 or args[0] not in ("dataset", "model"):
        print("Usage: delete dataset|model <id>")
        return
    item_id = _parse_id(args[1:], "delete dataset|model <id>")
    if item_id is None:
        return
    if args[0] == "dataset":
        loop.run_until_complete(wb.delete_dataset(item_id))
    else:
        loop.run_until_complete(wb.delete_model(item_id))
    print(f"  ✓  Deleted {args[0]} {item_id}")


def _parse_id(args: List[str], usage: str) -> Optional[int]:
    if len(args) != 1:
        print(f"Usage: {usage}")
        return None
    try:
        return int(args[0])
    except ValueError:
        print(f"Not an id: {args[0]}")
        return None


def _print_notices(notices) -> None:
    if notices.error:
        print(f"  ✗  {notices.error}")
    if notices.success:
        print(f"  ✓  {notices.success}")


def _print_prediction(result: ExplainedPrediction) -> None:
    print(f"  Prediction: {result.prediction}")
    if result.confidence is not None and result.is_classification:
        print(f"  Confidence: {result.confidence * 100:.2f}%")
    for label, p in sorted(result.probabilities.items(), key=lambda kv: str(kv[0])):
        print(f"    P({label}) = {p}")
    contributions = result.top_contributions()
    if contributions:
        print("  Feature contributions:")
        for c in contributions:
            value = c.contribution or 0.0
            sign = "+" if value >= 0 else "-"
            print(f"    {sign} {c.feature_name}: {abs(value):.4f}")
    if result.explanation.explanation_text:
        print()
        for line in result.explanation.explanation_text.strip().split("\n"):
            print(f"  {line}")


COMMANDS: Dict[str, Callable[[List[str], Workbench, asyncio.AbstractEventLoop], None]] = {
    "help": _cmd_help,
    "datasets": _cmd_datasets,
    "upload": _cmd_upload,
    "use": _cmd_use,
    "columns": _cmd_columns,
    "target": _cmd_target,
    "toggle": _cmd_toggle,
    "name": _cmd_name,
    "type": _cmd_type,
    "train": _cmd_train,
    "models": _cmd_models,
    "model": _cmd_model,
    "set": _cmd_set,
    "fields": _cmd_fields,
    "predict": _cmd_predict,
    "login": _cmd_login,
    "delete": _cmd_delete,
}
