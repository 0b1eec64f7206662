import reflex as rx

from mis_canchas.api import create_api
from mis_canchas.state import State


def index() -> rx.Component:
    return rx.el.main(
        rx.el.h1("Mis Canchas", class_name="text-2xl font-semibold"),
        rx.cond(
            State.cash_register_is_open,
            rx.el.p("Caja abierta", class_name="text-green-700"),
            rx.el.p("Caja cerrada", class_name="text-gray-500"),
        ),
        class_name="p-6 flex flex-col gap-2",
    )


app = rx.App(api_transformer=create_api())
app.add_page(
    index,
    route="/",
    title="Mis Canchas",
    on_load=State.restore_session,
)
