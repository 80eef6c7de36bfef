#!/usr/bin/env python3
# Sphinx configuration for the ircwire API documentation.
import os
import sys
import datetime

sys.path.insert(0, os.path.abspath('..'))
import ircwire

project = ircwire.__name__
copyright = '{}, ircwire contributors'.format(datetime.date.today().year)
version = release = ircwire.__version__

extensions = ['sphinx.ext.autodoc', 'sphinx.ext.intersphinx', 'sphinx.ext.viewcode']
intersphinx_mapping = {'python': ('https://docs.python.org/3', None)}

master_doc = 'index'
exclude_patterns = ['_build']

# Read the Docs sets its own theme.
if os.environ.get('READTHEDOCS') != 'True':
    html_theme = 'sphinx_rtd_theme'
html_show_sphinx = False


def skip(app, what, name, obj, skip, options):
    """ Keep the reference to the public client API: no private members, no built-in handlers. """
    if skip:
        return True
    if name.startswith('_') and name != '__init__':
        return True
    return name == 'on_data' or name.startswith('on_raw_')


def setup(app):
    app.connect('autodoc-skip-member', skip)
