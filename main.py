"""Entry point — glues pystray (daemon thread) with tkinter (main thread)."""

import logging
import threading

from calendar_window import CalendarWindow
from icon_gen import create_icon_image
from settings import load_settings
from tray_icon import create_tray


def main() -> None:
    settings = load_settings()
    logging.basicConfig(
        level=settings["log_level"],
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    cal_win = CalendarWindow()

    # Callbacks marshalled onto the tkinter main thread
    def on_show() -> None:
        cal_win.root.after(0, cal_win.toggle)

    def on_export() -> None:
        cal_win.root.after(0, cal_win.export_month)

    def on_exit() -> None:
        def _quit() -> None:
            tray.stop()
            cal_win.hide()
            cal_win.root.destroy()
        cal_win.root.after(0, _quit)

    icon_image = create_icon_image()
    tray = create_tray(icon_image, on_show, on_exit, on_export=on_export)

    # Run pystray in a daemon thread so it doesn't block tkinter
    tray_thread = threading.Thread(target=tray.run, daemon=True)
    tray_thread.start()

    cal_win.show()
    # tkinter main loop on the main thread
    cal_win.root.mainloop()


if __name__ == "__main__":
    main()
