from __future__ import annotations

from typing import Callable, Dict, Optional

import customtkinter as ctk

from gridcutter.models.wizard import Step


class StepIndicator(ctk.CTkFrame):
    """Полоса шагов мастера; доступны только уже достигнутые шаги."""
    def __init__(self, master: ctk.CTk, **kwargs) -> None:
        super().__init__(master, **kwargs)

        self.on_step_click: Optional[Callable[[Step], None]] = None

        self._buttons: Dict[Step, ctk.CTkButton] = {}
        self._labels: Dict[Step, ctk.CTkLabel] = {}
        self._active_colors: Dict[Step, object] = {}

        column = 0
        for step in Step:
            if step > 0:
                sep = ctk.CTkLabel(self, text="—", text_color="gray50")
                sep.grid(row=0, column=column, padx=4, pady=8)
                column += 1
            btn = ctk.CTkButton(self, text=str(step + 1), width=36, height=36, corner_radius=18,
                                command=lambda s=step: self._emit_click(s))
            btn.grid(row=0, column=column, padx=(8, 4), pady=8)
            lbl = ctk.CTkLabel(self, text=step.label)
            lbl.grid(row=0, column=column + 1, padx=(0, 8), pady=8, sticky="w")
            self._buttons[step] = btn
            self._active_colors[step] = btn.cget("fg_color")
            self._labels[step] = lbl
            column += 2

        self.set_state(Step.UPLOAD, Step.UPLOAD)

    def set_state(self, current: Step, max_reached: Step) -> None:
        for step, btn in self._buttons.items():
            completed = step < current
            btn.configure(
                text="✓" if completed else str(step + 1),
                state="normal" if step <= max_reached else "disabled",
                fg_color=self._active_colors[step] if step <= current else "gray40",
                border_width=2 if step == current else 0,
            )
            weight = "bold" if step == current else "normal"
            self._labels[step].configure(font=ctk.CTkFont(weight=weight))

    def _emit_click(self, step: Step) -> None:
        if self.on_step_click:
            self.on_step_click(step)
