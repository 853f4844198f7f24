from monsterui.all import *
from fasthtml.common import *
from starwidgets import accordion, alert, configure_app, confirm, headers, highlight, latex, notifications, monsterui_theme

theme = monsterui_theme("zinc")

app, rt = fast_app(
    live=True,
    pico=False,
    hdrs=headers(theme),
)

configure_app(app, theme=theme)

SOURCE = '''def fib(n):
    a, b = 0, 1
    for _ in range(n):
        a, b = b, a + b
    return a
'''


@rt("/")
def index():
    messages = notifications(["Saved draft", "Two new comments", "Build passed"])
    warn = alert("Careful, this cannot be undone!")

    def report(ok):
        messages.update([*messages.observe().get(), "File overwritten" if ok else "File kept"])

    ask = confirm(report, "File exists, overwrite?")
    sections = accordion([
        ("Code", highlight(SOURCE)),
        ("Formula", latex(r"\sum_{i=1}^{\infty} \frac{1}{i^2} = \frac{\pi^2}{6}")),
    ], multiple=False)

    @warn.scope.method("show")
    def show_alert():
        warn.invoke()

    @ask.scope.method("ask")
    def ask_user():
        ask.invoke()

    return Titled(
        "starwidgets demo",
        Card(
            H3("Notifications"),
            messages,
            DivLAligned(
                Button("Alert", cls=ButtonT.destructive, **{"data-on-click": warn.scope.action("show")}),
                Button("Confirm", cls=ButtonT.primary, **{"data-on-click": ask.scope.action("ask")}),
            ),
            warn,
            ask,
        ),
        Card(H3("Accordion"), sections),
    )


if __name__ == "__main__":
    serve(reload=True)
