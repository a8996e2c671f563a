"""
Help text for the ai-cli command tree.

The command listing itself is generated from the registry; this is the
static framing around it.
"""

HELP_HEADER = """
ai-cli -- OpenAI resource manager
=================================

Usage: ai-cli <segment> <segment> ... [--name value]...

COMMANDS
--------
"""

HELP_FOOTER = """
CONVENTIONS
-----------

  --flag value      Set a parameter
  --flag            Given with no value: use the default, or for id flags,
                    the latest id of that kind found in the history log
  [--flag]          Optional; id flags left out also fall back to the latest

  Every create/update/delete is recorded in the history log
  (see: ai-cli log path). The API key is read from $OPENAI_API_KEY.
"""
