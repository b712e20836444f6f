"""
Command-line interface for instrumentation_sharding.

Sharded Run Pattern (same command on every node, only --node-index differs):
    shard-tests plan --manifest app-test.apk --classes classes.txt --total-nodes 3 --node-index 0

Commands:
    plan     - Resolve manifest identifiers and this node's classes
    shard    - Print or write one node's (or every node's) partition of a class list
    batches  - Show the batches a node's queue hands out, in order

Class lists hold one fully-qualified test class per line ('#' comments allowed).
"""

import logging

import click
import yaml

from .. import __version__
from ..errors import ShardingError


def _configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format='%(levelname)s %(name)s: %(message)s')


@click.group()
@click.version_option(version=__version__)
@click.option('--verbose', '-v', count=True, help='Increase log verbosity (-v info, -vv debug)')
def cli(verbose):
    """Instrumentation Sharding - partition test classes across nodes and devices."""
    _configure_logging(verbose)


@cli.command('plan')
@click.option('--manifest', '-m', 'manifest_path', required=True, type=click.Path(exists=True),
              help='Text AndroidManifest.xml, or a test APK carrying a text manifest')
@click.option('--classes', '-c', 'class_list', required=True, type=click.Path(exists=True),
              help='Class list of discovered test classes')
@click.option('--config', 'config_path', type=click.Path(exists=True),
              help='YAML run config (options below override it)')
@click.option('--total-nodes', '-t', type=click.IntRange(min=1), help='Number of nodes in the run')
@click.option('--node-index', '-n', type=click.IntRange(min=0), help="This node's zero-based index")
@click.option('--batch-size', '-b', type=click.IntRange(min=1), help='Classes per device batch')
@click.option('--filter', '-f', 'filter_patterns', help='Comma-separated class patterns')
def plan(manifest_path, class_list, config_path, total_nodes, node_index, batch_size, filter_patterns):
    """Resolve the run descriptor for this node."""
    from ..models import read_class_list
    from ..run.config import RunParameters
    from ..run.descriptor import plan_run

    try:
        params = RunParameters.from_yaml(config_path) if config_path else RunParameters()
        params = params.with_overrides(
            total_nodes=total_nodes,
            node_index=node_index,
            batch_size=batch_size,
            filter_patterns=filter_patterns,
        )
    except (ValueError, yaml.YAMLError) as e:
        raise click.UsageError(f"Invalid run config: {e}")

    try:
        descriptor = plan_run(manifest_path, lambda: read_class_list(class_list), params)
    except ShardingError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)

    click.echo(descriptor.describe())
    names = descriptor.class_names()
    if names is None:
        click.echo("Running all test classes (no sharding)")
        return
    for name in names:
        click.echo(f"  {name}")


@cli.command('shard')
@click.option('--classes', '-c', 'class_list', required=True, type=click.Path(exists=True),
              help='Class list of discovered test classes')
@click.option('--total-nodes', '-t', required=True, type=click.IntRange(min=1),
              help='Number of nodes in the run')
@click.option('--node-index', '-n', default=0, type=click.IntRange(min=0),
              help="This node's zero-based index")
@click.option('--filter', '-f', 'filter_patterns', help='Comma-separated class patterns')
@click.option('--output', '-o', 'output_file', type=click.Path(),
              help='Write the partition as a class list instead of printing it')
@click.option('--all', 'all_nodes', is_flag=True, help="Print every node's partition")
def shard(class_list, total_nodes, node_index, filter_patterns, output_file, all_nodes):
    """
    Compute a node's partition of a class list.

    Unlike 'plan', the filter is applied even with a single node, so this
    command can also be used to preview what a filter selects.
    """
    from ..models import read_class_list, write_class_list
    from ..selection.class_filter import filter_test_classes
    from ..selection.sharding import partition_all, shard_test_classes

    if node_index >= total_nodes:
        raise click.BadParameter(
            f"must be less than --total-nodes ({total_nodes})", param_hint="'--node-index'"
        )

    classes = filter_test_classes(read_class_list(class_list), filter_patterns)

    if all_nodes:
        for index, partition in enumerate(partition_all(classes, total_nodes)):
            click.echo(f"=== Node {index}: {len(partition)} classes ===")
            for test_class in partition:
                click.echo(f"  {test_class.class_name}")
        return

    owned = sorted(shard_test_classes(classes, total_nodes, node_index))
    if output_file:
        write_class_list(owned, output_file)
        click.echo(f"Wrote {len(owned)} classes for node {node_index} to {output_file}")
        return
    for test_class in owned:
        click.echo(test_class.class_name)


@cli.command('batches')
@click.option('--classes', '-c', 'class_list', required=True, type=click.Path(exists=True),
              help='Class list for this node')
@click.option('--batch-size', '-b', default=5, type=click.IntRange(min=1), help='Classes per batch')
def batches(class_list, batch_size):
    """Show the batches a work queue hands out for a class list."""
    from ..models import read_class_list
    from ..run.work_queue import TestClassQueue, class_names

    queue = TestClassQueue(read_class_list(class_list))
    click.echo(f"{queue.size()} classes, batch size {batch_size}")

    number = 0
    batch = queue.take_batch(batch_size)
    while batch is not None:
        number += 1
        click.echo(f"Batch {number}: {', '.join(class_names(batch))}")
        batch = queue.take_batch(batch_size)


def main():
    cli()


if __name__ == '__main__':
    main()
