"""
Stator Winding Designer - Main Application
Desktop UI for integral-slot winding layout, factors and coil diagrams
"""

import argparse
import logging
import sys
import tkinter as tk
from tkinter import messagebox, scrolledtext, ttk
from typing import Optional

from matplotlib.backends.backend_tkagg import FigureCanvasTkAgg

from config import (
    CIRCULAR_SURFACE_SIZE, DEFAULT_PHASES, DEFAULT_POLES, DEFAULT_SLOTS,
    LINEAR_SURFACE_SIZE,
)
from exceptions import WindingDesignError
from geometry import ROW_STACKING
from interaction import WindingController
from logging_config import LOG_LEVELS, setup_logging
from view_state import PHASE_FILTERS, ViewName, WindingSnapshot
from visualization import WindingVisualizer, create_surface_figure
from winding_model import coil_table
from winding_parameters import Connection, LayerType, MachineSpec, PitchType, format_summary

logger = logging.getLogger("winding_designer.main")

VIEW_TABS = [
    ("Circular View", ViewName.CIRCULAR),
    ("Linear View", ViewName.LINEAR),
]


class WindingDesignApp:
    """Main application class for the winding designer"""

    def __init__(self, root):
        self.root = root
        self.root.title("Stator Winding Designer")
        self.root.geometry("1600x960")

        self.controller = WindingController()
        self.visualizer = WindingVisualizer()
        self.controller.add_listener(self.on_snapshot)

        self.param_vars = {}
        self.option_vars = {}
        self.plot_figures = {}
        self.plot_canvases = {}
        self._syncing_table = False

        self.create_ui()

        # Pointer release anywhere ends a linear-view drag
        self.root.bind_all('<ButtonRelease-1>', lambda e: self.controller.pointer_up(), add='+')

        self.update_design()

    def create_ui(self):
        """Create the user interface"""
        main_container = ttk.PanedWindow(self.root, orient=tk.HORIZONTAL)
        main_container.pack(fill=tk.BOTH, expand=True, padx=5, pady=5)

        left_panel = ttk.Frame(main_container)
        main_container.add(left_panel, weight=1)

        right_panel = ttk.Frame(main_container)
        main_container.add(right_panel, weight=2)

        self.create_control_panel(left_panel)
        self.create_visualization_panel(right_panel)

    def create_control_panel(self, parent):
        """Create parameter controls, results and coil table"""
        title = ttk.Label(parent, text="Machine Parameters", font=('Arial', 14, 'bold'))
        title.pack(pady=10, fill=tk.X)

        params_frame = ttk.LabelFrame(parent, text="Winding Configuration", padding=10)
        params_frame.pack(pady=5, padx=10, fill=tk.X)

        self._add_spinbox(params_frame, 0, "Phases (m)", 'phases', DEFAULT_PHASES, 2, 12)
        self._add_spinbox(params_frame, 1, "Slots (Z)", 'num_slots', DEFAULT_SLOTS, 1, 288)
        self._add_spinbox(params_frame, 2, "Poles (2p)", 'num_poles', DEFAULT_POLES, 2, 96, step=2)
        self._add_combobox(params_frame, 3, "Connection", 'connection',
                           [c.value for c in Connection], Connection.STAR.value)
        self._add_combobox(params_frame, 4, "Winding", 'layer_type',
                           [t.value for t in LayerType], LayerType.DOUBLE.value)
        self._add_combobox(params_frame, 5, "Coil pitch", 'pitch_type',
                           [p.value for p in PitchType], PitchType.FULL.value)
        self.pitch_offset_spin = self._add_spinbox(params_frame, 6, "Pitch offset (k)",
                                                   'pitch_offset', 0, 0, 48)
        self.param_vars['pitch_type'].trace_add('write', lambda *args: self.update_pitch_state())
        self.update_pitch_state()

        update_btn = ttk.Button(parent, text="Calculate", command=self.update_design)
        update_btn.pack(pady=10, padx=10, fill=tk.X)

        display_frame = ttk.LabelFrame(parent, text="Display", padding=10)
        display_frame.pack(pady=5, padx=10, fill=tk.X)

        for row, (label, key, default) in enumerate([
            ("Slot numbers", 'show_slot_numbers', True),
            ("Direction arrows", 'show_direction_arrows', False),
            ("Coil indices", 'show_coil_indices', False),
            ("Phase labels", 'show_phase_labels', False),
        ]):
            var = tk.BooleanVar(value=default)
            self.option_vars[key] = var
            ttk.Checkbutton(display_frame, text=label, variable=var,
                            command=self.update_display_options).grid(row=row // 2, column=row % 2,
                                                                      sticky=tk.W, padx=5, pady=2)

        self._add_combobox(display_frame, 2, "Linear phases", 'phase_filter',
                           list(PHASE_FILTERS), 'ALL', store=self.option_vars,
                           command=self.update_display_options)
        self._add_combobox(display_frame, 3, "Row stacking", 'row_stacking',
                           sorted(ROW_STACKING), 'phase', store=self.option_vars,
                           command=self.update_display_options)

        results_frame = ttk.LabelFrame(parent, text="Results", padding=5)
        results_frame.pack(fill=tk.BOTH, expand=True, padx=10, pady=5)
        self.results_text = scrolledtext.ScrolledText(results_frame, width=40, height=14,
                                                      font=('Courier', 9))
        self.results_text.pack(fill=tk.BOTH, expand=True)

        table_frame = ttk.LabelFrame(parent, text="Coils", padding=5)
        table_frame.pack(fill=tk.BOTH, expand=True, padx=10, pady=5)
        columns = ('Coil', 'Phase', 'Start', 'End', 'Direction')
        self.coil_tree = ttk.Treeview(table_frame, columns=columns, show='headings',
                                      height=10, selectmode='browse')
        for col in columns:
            self.coil_tree.heading(col, text=col)
            self.coil_tree.column(col, width=70, anchor=tk.CENTER)
        scrollbar = ttk.Scrollbar(table_frame, orient="vertical", command=self.coil_tree.yview)
        self.coil_tree.configure(yscrollcommand=scrollbar.set)
        self.coil_tree.pack(side=tk.LEFT, fill=tk.BOTH, expand=True)
        scrollbar.pack(side=tk.RIGHT, fill=tk.Y)
        self.coil_tree.bind('<<TreeviewSelect>>', self.on_table_select)

    def _add_spinbox(self, parent, row, label, key, default, min_val, max_val, step=1):
        ttk.Label(parent, text=label, width=18).grid(row=row, column=0, sticky=tk.W, pady=2)
        var = tk.StringVar(value=str(default))
        self.param_vars[key] = var
        spin = ttk.Spinbox(parent, textvariable=var, from_=min_val, to=max_val,
                           increment=step, width=10)
        spin.grid(row=row, column=1, sticky=tk.W, pady=2, padx=5)
        return spin

    def _add_combobox(self, parent, row, label, key, values, default, store=None, command=None):
        store = self.param_vars if store is None else store
        ttk.Label(parent, text=label, width=18).grid(row=row, column=0, sticky=tk.W, pady=2)
        var = tk.StringVar(value=default)
        store[key] = var
        combo = ttk.Combobox(parent, textvariable=var, values=values, state="readonly", width=10)
        combo.grid(row=row, column=1, sticky=tk.W, pady=2, padx=5)
        if command:
            combo.bind('<<ComboboxSelected>>', lambda e: command())
        return combo

    def create_visualization_panel(self, parent):
        """Tabbed circular and linear views"""
        self.plot_notebook = ttk.Notebook(parent)
        self.plot_notebook.pack(fill=tk.BOTH, expand=True, padx=5, pady=5)

        for tab_name, view in VIEW_TABS:
            tab_frame = ttk.Frame(self.plot_notebook)
            self.plot_notebook.add(tab_frame, text=tab_name)

            size = CIRCULAR_SURFACE_SIZE if view is ViewName.CIRCULAR else LINEAR_SURFACE_SIZE
            fig = create_surface_figure(size)
            self.plot_figures[view] = fig

            canvas = FigureCanvasTkAgg(fig, master=tab_frame)
            canvas.draw()
            canvas.get_tk_widget().pack(fill=tk.BOTH, expand=True)
            self.plot_canvases[view] = canvas

            if view is ViewName.LINEAR:
                ttk.Button(tab_frame, text="Reset View",
                           command=self.controller.reset_view).pack(pady=5)

        self.plot_notebook.bind('<<NotebookTabChanged>>', self.on_tab_changed)

        circular = self.plot_canvases[ViewName.CIRCULAR]
        circular.mpl_connect('button_press_event', self.on_circular_click)

        linear = self.plot_canvases[ViewName.LINEAR]
        linear.mpl_connect('button_press_event', self.on_linear_press)
        linear.mpl_connect('motion_notify_event', self.on_linear_motion)
        linear.mpl_connect('button_release_event', lambda e: self.controller.pointer_up())
        linear.mpl_connect('scroll_event', self.on_linear_scroll)

    # ------------------------------------------------------------------
    # Parameters
    # ------------------------------------------------------------------

    def update_pitch_state(self):
        """The pitch offset only applies to custom pitch"""
        custom = self.param_vars['pitch_type'].get() == PitchType.CUSTOM.value
        if custom:
            self.pitch_offset_spin.state(['!disabled'])
        else:
            self.param_vars['pitch_offset'].set('0')
            self.pitch_offset_spin.state(['disabled'])

    def read_spec(self) -> MachineSpec:
        """Build a MachineSpec from the controls"""
        values = {}
        for key in ('phases', 'num_slots', 'num_poles', 'pitch_offset'):
            raw = self.param_vars[key].get().strip()
            try:
                values[key] = float(raw) if raw else raw
            except ValueError:
                values[key] = raw
        for key in ('connection', 'layer_type', 'pitch_type'):
            values[key] = self.param_vars[key].get()
        return MachineSpec(**values)

    def update_design(self):
        """Recalculate the design from the current controls"""
        try:
            spec = self.read_spec()
            design = self.controller.recalculate(spec)
        except WindingDesignError as e:
            messagebox.showerror("Invalid winding", str(e))
            return

        self.results_text.delete(1.0, tk.END)
        self.results_text.insert(1.0, design.figures.format_output() + "\n"
                                 + format_summary(spec, design.figures))
        self.update_table()

    def update_table(self):
        self.coil_tree.delete(*self.coil_tree.get_children())
        table = coil_table(self.controller.coils)
        for i, row in enumerate(table.itertuples(index=False)):
            self.coil_tree.insert('', tk.END, iid=str(i), values=tuple(row))
        self.sync_table_selection(self.controller.selection.index)

    def update_display_options(self):
        changes = {key: var.get() for key, var in self.option_vars.items()}
        self.controller.set_options(**changes)

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def on_snapshot(self, snapshot: WindingSnapshot):
        """Repaint both views and mirror the selection in the table"""
        for view, plot in ((ViewName.CIRCULAR, self.visualizer.plot_circular_view),
                           (ViewName.LINEAR, self.visualizer.plot_linear_view)):
            fig = self.plot_figures.get(view)
            if fig is None:
                continue
            plot(fig.axes[0], snapshot)
            self.plot_canvases[view].draw_idle()
        self.sync_table_selection(snapshot.selected_index)

    def sync_table_selection(self, index: Optional[int]):
        if not hasattr(self, 'coil_tree'):
            return
        current = self.coil_tree.selection()
        wanted = () if index is None else (str(index),)
        if tuple(current) == wanted or (wanted and not self.coil_tree.exists(wanted[0])):
            return
        self._syncing_table = True
        try:
            if wanted:
                self.coil_tree.selection_set(wanted)
                self.coil_tree.see(wanted[0])
            else:
                self.coil_tree.selection_remove(current)
        finally:
            self._syncing_table = False

    def on_table_select(self, event):
        if self._syncing_table:
            return
        selected = self.coil_tree.selection()
        if selected:
            self.controller.select_row(int(selected[0]))

    def on_tab_changed(self, event):
        index = self.plot_notebook.index(self.plot_notebook.select())
        self.controller.toggle_view(VIEW_TABS[index][1])

    def on_circular_click(self, event):
        if event.xdata is None or event.ydata is None:
            return
        self.controller.click_circular(event.xdata, event.ydata)

    def _linear_surface_point(self, event):
        """Event position in linear-surface pixels, valid outside the axes too"""
        ax = self.plot_figures[ViewName.LINEAR].axes[0]
        x, y = ax.transData.inverted().transform((event.x, event.y))
        return float(x), float(y)

    def on_linear_press(self, event):
        if event.button != 1 or event.inaxes is None:
            return
        self.controller.pointer_down(*self._linear_surface_point(event))

    def on_linear_motion(self, event):
        self.controller.pointer_move(*self._linear_surface_point(event))

    def on_linear_scroll(self, event):
        self.controller.wheel(event.step, *self._linear_surface_point(event))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Stator winding designer")
    parser.add_argument('--phases', type=int, default=DEFAULT_PHASES)
    parser.add_argument('--slots', type=int, default=DEFAULT_SLOTS)
    parser.add_argument('--poles', type=int, default=DEFAULT_POLES)
    parser.add_argument('--layer', choices=[t.value for t in LayerType], default=LayerType.DOUBLE.value)
    parser.add_argument('--pitch', choices=[p.value for p in PitchType], default=PitchType.FULL.value)
    parser.add_argument('--k', type=int, default=0, help="pitch offset for custom pitch")
    parser.add_argument('--connection', choices=[c.value for c in Connection], default=Connection.STAR.value)
    parser.add_argument('--stacking', choices=sorted(ROW_STACKING), default='phase',
                        help="linear-view row stacking")
    parser.add_argument('--arrows', action='store_true', help="draw direction arrows")
    parser.add_argument('--labels', action='store_true', help="draw coil index and phase labels")
    parser.add_argument('--export', metavar='PREFIX',
                        help="compute headless and write PREFIX_circular.png / PREFIX_linear.png")
    parser.add_argument('--log-level', type=str.upper, choices=LOG_LEVELS, default='INFO')
    parser.add_argument('--log-file')
    return parser


def run_headless(args) -> int:
    """Compute one design, print it and export both views"""
    controller = WindingController()
    try:
        spec = MachineSpec(
            phases=args.phases, num_slots=args.slots, num_poles=args.poles,
            layer_type=args.layer, pitch_type=args.pitch, pitch_offset=args.k,
            connection=args.connection,
        )
        controller.set_options(row_stacking=args.stacking, show_direction_arrows=args.arrows,
                               show_coil_indices=args.labels, show_phase_labels=args.labels)
        design = controller.recalculate(spec)
    except WindingDesignError as e:
        logger.error("Invalid winding: %s", e)
        return 1

    print(design.figures.format_output())
    print(format_summary(spec, design.figures))
    print(coil_table(design.coils).to_string(index=False))

    WindingVisualizer().export_views(controller.snapshot(), args.export)
    return 0


def main(argv=None):
    """Main entry point"""
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level, args.log_file)

    if args.export:
        return run_headless(args)

    root = tk.Tk()
    style = ttk.Style()
    style.theme_use('clam')

    WindingDesignApp(root)

    def on_closing():
        root.quit()
        root.destroy()

    root.protocol("WM_DELETE_WINDOW", on_closing)
    root.mainloop()
    return 0


if __name__ == "__main__":
    sys.exit(main())
