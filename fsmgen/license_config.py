"""
Generated code header configuration - single source of truth

Holds the banner placed at the top of every generated module. Change the
text here and regenerate; nothing else in the generator hardcodes it.

Usage:
    from fsmgen.license_config import get_generated_code_header
    print(get_generated_code_header('door.fsm'))
"""

from typing import Optional

HEADER_CONFIG = {
    'project': {
        'name': 'fsmgen',
        'description': 'declarative state machine compiler',
    },

    # Generated modules belong to whoever wrote the description
    'generated_code': {
        'spdx_license': 'MIT',
        'copyright_holder': '[Author of the state machine description]',
        'notice': 'Do not edit: regenerate from the description instead.',
    },
}


def get_generator_line(source_name: Optional[str] = None) -> str:
    """Get the 'Generated by' line, naming the description when known"""
    project = HEADER_CONFIG['project']
    if source_name:
        return f"Generated by {project['name']} ({project['description']}) from {source_name}"
    return f"Generated by {project['name']} ({project['description']})"


def get_generated_code_header(source_name: Optional[str] = None) -> str:
    """
    Get the SPDX header for generated modules

    Every line is a Python comment, so the header can sit above the module
    docstring.
    """
    generated = HEADER_CONFIG['generated_code']
    lines = [
        f"SPDX-License-Identifier: {generated['spdx_license']}",
        f"SPDX-FileCopyrightText: {generated['copyright_holder']}",
        "",
        get_generator_line(source_name),
        generated['notice'],
    ]
    return '\n'.join(f'# {line}'.rstrip() for line in lines)
