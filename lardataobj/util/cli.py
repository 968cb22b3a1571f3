#!/usr/bin/env python3
'''
CLI decorators to help build __main__'s

'''
import os
import click
import functools
from pathlib import Path

## All lardataobj modules use logging, not print()
import logging
log = logging.getLogger('lardataobj')
debug = log.debug
info = log.info
warning = log.warning
critical = log.critical

# Every lardataobj __main__.py must use this to define the command group.
def context(group_name, log_name="lardataobj"):
    '''
    Add "standard" base options and set up logging.

    Usage from a __main__.py:

    To make the Click group, pass the "short name" of the sub package as
    the group_name.  Eg "rawdata" or "recobase":

        from lardataobj.util.cli import context, log
        @context("grp")
        def cli(ctx):
            """
            lardataobj command for grp
            """
            pass

    To use logging in a command:

        @cli.command("my-command")
        def my_command():
            """
            My docstring
            """
            log.debug("some debug message")

    To use logging in a module

        import logging
        log = logging.getLogger("lardataobj.grp")
        def foo():
            log.debug("some message")

    '''

    def decorator(func):
        cmddef = dict(context_settings = dict(help_option_names=['-h', '--help']))
        @click.group(group_name, **cmddef)
        @click.option("-l","--log-output", multiple=True,  help="log to a file [default:stdout]")
        @click.option("-L","--log-level", default="info", help="set logging level [default:info]")
        @click.pass_context
        @functools.wraps(func)
        def wrapper(ctx, log_output, log_level, *args, **kwds):
            '''
            lardataobj command
            '''
            log = logging.getLogger(log_name)
            try:
                level = int(log_level)      # try for number
            except ValueError:
                level = log_level.upper()   # else assume label
            log.setLevel(level)

            if not log_output:
                log_output = ["stdout"]
            for one in log_output:
                if one == "stdout":
                    sh = logging.StreamHandler()
                    sh.setLevel(level)
                    log.addHandler(sh)
                    continue
                fh = logging.FileHandler(one)
                fh.setLevel(level)
                log.addHandler(fh)
            return
        return wrapper
    return decorator


def default_config_path(name, cname=None):
    '''
    Return the XDG location of the config file for application name.
    '''
    if not cname:
        cname = name + ".cfg"
    base = os.environ.get("XDG_CONFIG_HOME", None)
    if base:
        base = Path(base)
    else:
        base = Path(os.environ.get("HOME", "~")).expanduser() / ".config"
    return base / name / cname


def config_file(name, section=None, cname=None, shortarg="-c", longarg="--config", defaults=None):
    '''
    A decorator for a command that accepts a config file.

    This transforms the config file to a config parser object which is
    passed to the command under the long argument name.

    - name :: the application name, used to locate default XDG config path.
    - section :: if given, any keyword which is None is set from the key
      of the same name in that section of the config.
    - cname :: config file name if not based on name
    - defaults :: a dict of fallback values, also used to convert the
      config strings to the type of the default.
    '''
    import configparser
    defaults = defaults or dict()

    def decorator(func):
        @click.option(shortarg, longarg, type=str, default=None, help="Set Configuration file.")
        @functools.wraps(func)
        def wrapper(*args, **kwds):
            cfg = configparser.ConfigParser()
            varname = longarg.replace("--","").replace("-","_")
            cpath = kwds.pop(varname)
            if cpath:
                cpath = Path(cpath)
                if not cpath.exists():
                    raise click.BadParameter(f'no such config file: {cpath}')
            else:
                cpath = default_config_path(name, cname)
            if cpath.exists():
                log.debug(f'reading config: {cpath}')
                cfg.read(cpath)

            if section:
                sec = cfg[section] if cfg.has_section(section) else dict()
                for key, val in kwds.items():
                    if val is not None:
                        continue
                    val = sec.get(key.replace("_","-"), sec.get(key, None))
                    dval = defaults.get(key, None)
                    if val is None:
                        val = dval
                    if val is None:
                        continue
                    if isinstance(dval, bool) and isinstance(val, str):
                        val = val.lower() in ("1", "yes", "true", "on")
                    elif dval is not None:
                        val = type(dval)(val)
                    kwds[key] = val

            kwds[varname] = cfg
            return func(*args, **kwds)
        return wrapper
    return decorator
