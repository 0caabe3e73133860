#!/usr/bin/env python3
"""
treezoom [options] [path]
path:     optional, defaults to PWD
          - a .json file with labels/parents[/ids/values/text] arrays,
            or a saved directory scan
          - a .csv file with label,parent[,id][,value] columns
          - a directory, scanned with file sizes as values
options:
- --renderer {tk,svg,mpl}
- --kind {treemap,sunburst}
- --packing {squarify,binary,dice,slice,slice-dice,dice-slice}
- --maxdepth N, --level ID       # initial zoom
- --output FILE                  # svg/mpl output file
- --exclude-dir=dirname  OR  -d dirname
- --exclude-file=filename
- --exclude-filter=filter
- --save                         # archive the directory scan
- -v, -vv                        # debug, trace logging
"""
import argparse
import csv
import json
import os
import pathlib
import socket
import sys
from datetime import datetime as dt

from chart import Chart
from logger import logger, set_verbosity
from scan import count_files, dict_to_tree, get_directory_tree, tree_to_dict, tree_to_rows
from utils import format_bytes

NOW = dt.strftime(dt.now(), '%Y%m%d-%H%M%S')
HOST = os.getenv('MACHINE', socket.gethostname())


def get_config_path():
    config_file_path = os.path.expanduser('~/.config/treezoom.json')
    if not os.path.exists(config_file_path):
        script_path = str(pathlib.Path(__file__).parent.resolve())
        config_file_path = script_path + '/config.json'
    return config_file_path


def parse_config(path=None):
    path = path or get_config_path()
    logger.debug('using config file: %s' % path)
    with open(path) as f:
        return json.load(f)


def parse_args(args):
    parser = argparse.ArgumentParser(prog='treezoom', description='zoomable treemap and sunburst charts')
    parser.add_argument('path', nargs='?', default='.')
    parser.add_argument('--renderer', choices=['tk', 'svg', 'mpl'])
    parser.add_argument('--kind', choices=['treemap', 'sunburst'])
    parser.add_argument('--packing')
    parser.add_argument('--maxdepth', type=int)
    parser.add_argument('--level')
    parser.add_argument('-o', '--output')
    parser.add_argument('-d', '--exclude-dir', dest='exclude_dirs', action='append', default=[])
    parser.add_argument('--exclude-file', dest='exclude_files', action='append', default=[])
    parser.add_argument('--exclude-filter', dest='exclude_filters', action='append', default=[])
    parser.add_argument('-x', '--skip-mount', action='store_true', default=None)
    parser.add_argument('--save', dest='save_to_archive', action='store_true', default=None)
    parser.add_argument('-v', '--verbose', action='count', default=0)
    return parser.parse_args(args)


def merge_flags(config_flags, args):
    """CLI over config file; list values are combined rather than replaced."""
    flags = dict(config_flags)
    for k, v in vars(args).items():
        key = k.replace('_', '-')
        if v is None or v == []:
            continue
        if isinstance(v, list):
            flags[key] = list(flags.get(key, [])) + v
        else:
            flags[key] = v
    return flags


def chart_options(config_chart, flags):
    opts = dict(config_chart)
    for k in ('kind', 'packing', 'maxdepth', 'level'):
        if flags.get(k) is not None:
            opts[k] = flags[k]
    return opts


def load_json(path):
    with open(path) as f:
        data = json.load(f)
    if 'tree' in data:
        # saved directory scan
        logger.info('loaded scan of %s from %s' % (data.get('root', '?'), path))
        return tree_to_rows(dict_to_tree(data['tree']))
    return data


def load_csv(path):
    rows = {'labels': [], 'parents': [], 'ids': [], 'values': []}
    with open(path, newline='') as f:
        for r in csv.DictReader(f):
            rows['labels'].append(r.get('label', ''))
            rows['parents'].append(r.get('parent', '') or '')
            rows['ids'].append(r.get('id', '') or '')
            v = (r.get('value') or '').strip()
            rows['values'].append(float(v) if v else None)
    if not any(rows['ids']):
        del rows['ids']
    if all(v is None for v in rows['values']):
        del rows['values']
    return rows


def scan_directory(root, flags):
    t0 = dt.now()
    t = get_directory_tree(
        root,
        exclude_dirs=flags.get('exclude-dirs', []),
        exclude_files=flags.get('exclude-files', []),
        exclude_filters=flags.get('exclude-filters', []),
        skip_mount=flags.get('skip-mount', False),
    )
    delta_t = (dt.now() - t0).total_seconds()
    logger.info('%f sec to scan %s / %s files' % (delta_t, format_bytes(t.size), count_files(t)))
    if flags.get('save-to-archive'):
        save_scan(t, root, flags, delta_t)
    return tree_to_rows(t)


def load_input(path, flags):
    if os.path.isdir(path):
        return scan_directory(path.rstrip(os.sep) or os.sep, flags)
    ext = os.path.splitext(path)[1].lower()
    if ext == '.json':
        return load_json(path)
    if ext == '.csv':
        return load_csv(path)
    raise ValueError('unsupported input: %s (expected a directory, .json or .csv)' % path)


def get_archive_location(flags, rootpath, host=HOST, timestamp=NOW):
    if rootpath == '/':
        # prevent clobber
        rootpath = 'root'
    rootpath_slug = rootpath.lstrip('/').replace('/', '-')
    pattern = flags.get('archive-name-pattern', '')
    if not pattern:
        return ''
    archive_basename = pattern
    archive_basename = archive_basename.replace('%host', host)
    archive_basename = archive_basename.replace('%root', rootpath_slug)
    archive_basename = archive_basename.replace('%timestamp', timestamp)
    return '%s/%s' % (os.path.expanduser(flags.get('archive-base-path', '.')), archive_basename)


def save_scan(t, root, flags, delta_t):
    realroot = os.path.realpath(root)
    archive_filename = get_archive_location(flags, realroot)
    if not archive_filename:
        return
    data = {
        'tree': tree_to_dict(t),
        'root': realroot,
        'host': HOST,
        'scan_timestamp': NOW,
        'scan_duration_seconds': delta_t,
    }
    logger.info('archiving results to:\n  %s' % archive_filename)
    try:
        os.makedirs(os.path.dirname(archive_filename), exist_ok=True)
        with open(archive_filename, 'w') as f:
            json.dump(data, f)
    except OSError as exc:
        logger.warning('could not archive scan: %s' % exc)


def make_chart(data, options, width, height):
    options = dict(options)
    kind = options.pop('kind', 'treemap')
    font_size = options.pop('font_size', 12)
    for k in ('branchvalues', 'count'):
        if k in data:
            options[k] = data[k]
    chart = Chart(kind, width, height, font_size=font_size, **options)
    chart.set_data(data.get('labels'), data.get('parents'), ids=data.get('ids'),
                   values=data.get('values'), text=data.get('text'))
    chart.finish()
    return chart


def main(argv=None):
    args = parse_args(sys.argv[1:] if argv is None else argv)
    set_verbosity(args.verbose)
    config = parse_config()
    flags = merge_flags(config.get('flags', {}), args)
    for k, v in sorted(flags.items()):
        logger.debug('  %s: %s' % (k, v))

    path = args.path
    data = load_input(path, flags)
    options = chart_options(config.get('chart', {}), flags)
    title = os.path.realpath(path)
    renderer = flags.get('renderer', 'tk')

    if renderer == 'svg':
        from renderers import svg_basic
        params = config.get('svg-renderer', {})
        chart = make_chart(data, options, params.get('width', 1200), params.get('height', 800))
        svg_basic.render(chart, config, flags.get('output'))
    elif renderer == 'mpl':
        from renderers import mpl
        chart = make_chart(data, options, 1200, 800)
        mpl.render(chart, title=title, output=flags.get('output'))
    else:
        from renderers import tk
        params = config.get('tk_renderer', {})
        chart = make_chart(data, options, params.get('width', 1200), params.get('height', 800))
        tk.init_app(chart, config, title)
    return 0


if __name__ == '__main__':
    sys.exit(main())
