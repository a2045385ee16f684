import customtkinter as ctk

from gridcutter.controllers.app_controller import AppController
from gridcutter.ui.bottom_bar import BottomBar
from gridcutter.ui.crop_viewer import CropViewer
from gridcutter.ui.sidebar import Sidebar
from gridcutter.ui.step_indicator import StepIndicator


class GridCutterApp(ctk.CTk):
    def __init__(self) -> None:
        super().__init__()
        ctk.set_appearance_mode("system")
        ctk.set_default_color_theme("blue")

        self.title("Grid Cutter")
        self.minsize(1000, 680)

        # root layout: steps on top, viewer left, sidebar right, bar at the bottom
        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(0, weight=0)
        self.grid_rowconfigure(1, weight=1)
        self.grid_rowconfigure(2, weight=0)

        self._steps = StepIndicator(self, fg_color="transparent")
        self._steps.grid(row=0, column=0, columnspan=2, pady=(8, 0))

        self._viewer = CropViewer(self)
        self._viewer.grid(row=1, column=0, sticky="nsew", padx=(12, 6), pady=(12, 6))

        self._sidebar = Sidebar(self)
        self._sidebar.grid(row=1, column=1, sticky="ns", padx=(6, 12), pady=(12, 6))

        self._bottom = BottomBar(self)
        self._bottom.grid(row=2, column=0, columnspan=2, sticky="ew", padx=12, pady=(0, 12))

        self._controller = AppController(
            steps=self._steps, viewer=self._viewer, sidebar=self._sidebar, bottom=self._bottom, window=self
        )
        self._controller.bind_events()
