"""Jinja2 templates for terminal reports.

Templates emit rich console markup; every interpolated path or message goes
through the ``esc`` filter so brackets in file names are printed literally.
"""

CHECK_TEMPLATE = """\
{% for item in reports %}
{% if not loop.first %}

{% endif %}
{% if item.error %}
[red]{{ item.path|esc }}[/] {{ item.error|esc }}
{% elif not item.entries %}
[blue]{{ item.path|esc }}[/] [bold green]{{ marks.ok }}[/]
{% else %}
[blue]{{ item.path|esc }}[/] [bold red]{{ marks.bad }}[/] [bright_yellow]{{ item.entries|length }} misplaced {{ "entry" if item.entries|length == 1 else "entries" }}[/]
{% if item.directories %}
[bold]Directories[/] [bold bright_yellow]({{ item.directories|length }})[/][bold]:[/] {{ item.directories|map("esc")|join(", ") }}
{% endif %}
{% if item.files %}
[bold]Files[/] [bold bright_yellow]({{ item.files|length }})[/][bold]:[/] {{ item.files|map("esc")|join(", ") }}
{% endif %}
{% endif %}
{% endfor %}
{% if hidden %}
{% if reports %}

{% endif %}
[bold italic]{{ marks.ok_prefix }}{{ hidden }} {{ "rule" if hidden == 1 else "rules" }}[/] [italic]were hidden from the output (nothing misplaced)[/]
{% endif %}
{% if hint %}

[bold yellow]{{ hint }}[/] [dim](Run auto-move command)[/]
{% endif %}
"""

AUTOMOVE_TEMPLATE = """\
{% for item in rules %}
{% if not loop.first %}

{% endif %}
{% if item.error %}
[red]{{ item.name|esc }}[/] {{ item.error|esc }}
{% elif not item.actions %}
[blue]{{ item.name|esc }}[/] [bold green]{{ marks.ok }}[/]
{% else %}
[blue]{{ item.name|esc }}[/] [dim]{{ marks.dot }}[/] {{ item.summary|join(", ") }}
{% if item.targets %}
=> [bold]{{ "Moving To" if dry_run else "Moved To" }}[/] {{ item.targets|join(", ") }}
{% endif %}
{% for reason in item.problems %}
[italic bright_red]{{ reason|esc }}[/]
{% endfor %}
{% endif %}
{% endfor %}
{% if hidden %}
{% if rules %}

{% endif %}
[bold italic]{{ marks.ok_prefix }}{{ hidden }} {{ "rule" if hidden == 1 else "rules" }}[/] [italic]were hidden from the output (nothing to move)[/]
{% endif %}
"""
