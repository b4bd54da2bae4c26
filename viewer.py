import tkinter as tk
from typing import Optional

from PIL import Image, ImageTk

from ascii_art import AsciiGrid
from converters import buffer_to_image
from pixel_buffer import PixelBuffer

BG_MAIN = "#f0f0f0"
BG_TOOLBAR = "#2d2d30"
BG_BUTTON = "#3e3e42"
FG_BUTTON = "#ffffff"
BG_PANEL = "#ffffff"
FONT_HEADER = ("Segoe UI", 11, "bold")
FONT_TEXT = ("Segoe UI", 10)
FONT_MONO = ("Consolas", 8)


class FilterPreview(tk.Frame):
    """Source bitmap on the left, filtered bitmap (or ASCII text) on the right."""

    def __init__(self, master, before: PixelBuffer, after=None, title: str = "Filtered"):
        super().__init__(master, bg=BG_MAIN)
        self.master = master
        self.pack(fill="both", expand=True)

        # === Top Toolbar ===
        toolbar = tk.Frame(self, bg=BG_TOOLBAR, padx=10, pady=8)
        toolbar.pack(side="top", fill="x")
        for label, command in (("Zoom In", self.zoom_in), ("Zoom Out", self.zoom_out)):
            tk.Button(toolbar, text=label, command=command,
                      bg=BG_BUTTON, fg=FG_BUTTON,
                      font=("Segoe UI", 10, "bold"), relief="flat",
                      padx=10, pady=4).pack(side="left", padx=5)

        self.pixel_label = tk.Label(toolbar, text="Click a pixel to view its RGB values.",
                                    bg=BG_TOOLBAR, fg=FG_BUTTON, font=FONT_TEXT)
        self.pixel_label.pack(side="right", padx=5)

        # === Panes ===
        main_frame = tk.Frame(self, bg=BG_MAIN)
        main_frame.pack(fill="both", expand=True, padx=10, pady=10)

        self.zoom_factor = 1.0
        self.images = [buffer_to_image(before)]
        self.canvases = [self._make_canvas(main_frame, "Original")]
        self.tk_imgs = []

        if isinstance(after, AsciiGrid):
            self._make_text(main_frame, title, after)
        elif after is not None:
            self.images.append(buffer_to_image(after))
            self.canvases.append(self._make_canvas(main_frame, title))

        self.display_images()

    def _make_canvas(self, parent, heading: str) -> tk.Canvas:
        frame = tk.Frame(parent, bg=BG_MAIN)
        frame.pack(side="left", fill="both", expand=True, padx=5)
        tk.Label(frame, text=heading, font=FONT_HEADER, bg=BG_MAIN).pack(anchor="w")
        canvas = tk.Canvas(frame, bg=BG_PANEL, cursor="cross")
        canvas.pack(fill="both", expand=True)
        index = len(getattr(self, "canvases", []))
        canvas.bind("<Button-1>", lambda e, i=index: self.get_pixel_info(i, e))
        canvas.bind("<MouseWheel>", self.on_mousewheel)
        canvas.bind("<Button-4>", self.on_mousewheel_linux)
        canvas.bind("<Button-5>", self.on_mousewheel_linux)
        return canvas

    def _make_text(self, parent, heading: str, grid: AsciiGrid) -> None:
        frame = tk.Frame(parent, bg=BG_MAIN)
        frame.pack(side="left", fill="both", expand=True, padx=5)
        tk.Label(frame, text=heading, font=FONT_HEADER, bg=BG_MAIN).pack(anchor="w")
        text = tk.Text(frame, font=FONT_MONO, wrap="none", bg=BG_PANEL, relief="flat")
        text.pack(fill="both", expand=True)
        text.insert("1.0", grid.to_text())
        text.configure(state="disabled")

    # === Display & Zoom ===
    def display_images(self):
        self.tk_imgs = []
        for image, canvas in zip(self.images, self.canvases):
            w = max(1, int(image.width * self.zoom_factor))
            h = max(1, int(image.height * self.zoom_factor))
            tk_img = ImageTk.PhotoImage(image.resize((w, h), Image.Resampling.NEAREST))
            self.tk_imgs.append(tk_img)
            canvas.delete("all")
            canvas.create_image(0, 0, anchor="nw", image=tk_img)
            canvas.config(scrollregion=canvas.bbox("all"))

    def zoom_in(self):
        self.zoom_factor *= 1.25
        self.display_images()

    def zoom_out(self):
        self.zoom_factor /= 1.25
        self.display_images()

    def on_mousewheel(self, event):
        if event.delta > 0:
            self.zoom_in()
        else:
            self.zoom_out()

    def on_mousewheel_linux(self, event):
        if event.num == 4:
            self.zoom_in()
        elif event.num == 5:
            self.zoom_out()

    # === Pixel Info ===
    def get_pixel_info(self, index: int, event):
        image = self.images[index]
        canvas = self.canvases[index]
        x = int(canvas.canvasx(event.x) / self.zoom_factor)
        y = int(canvas.canvasy(event.y) / self.zoom_factor)
        if 0 <= x < image.width and 0 <= y < image.height:
            r, g, b = image.getpixel((x, y))
            self.pixel_label.config(text=f"X: {x}  Y: {y}  R: {r}  G: {g}  B: {b}")


def show_preview(before: PixelBuffer, after=None, title: Optional[str] = None) -> None:
    root = tk.Tk()
    root.title(f"Bitmap Filter - {title}" if title else "Bitmap Filter")
    root.geometry("1000x700")
    FilterPreview(root, before, after, title or "Filtered")
    root.mainloop()
