"""Plot the baked transfer function presets against a volume histogram."""

from pathlib import Path

import numpy as np
import matplotlib.pyplot as plt

from density_view_generator.field import DensityField
from density_view_generator.transfer import Preset, from_preset


def plot_presets(output_path: Path = Path("output/transfer_functions.png")):
    field = DensityField(resolution=(64, 64, 64))
    field.synthesize()

    fig, axes = plt.subplots(len(Preset), 1, figsize=(8, 2.2 * len(Preset)), sharex=True)
    densities = np.linspace(0.0, 1.0, 256)
    bucket_centers = (np.arange(len(field.histogram)) + 0.5) / len(field.histogram)

    for ax, preset in zip(axes, Preset):
        lut = from_preset(preset).bake_lookup_table(256)

        # color strip behind the opacity curve
        ax.imshow(lut[None, :, :3], extent=(0, 1, 0, 1), aspect="auto")
        ax.plot(densities, lut[:, 3], color="black", linewidth=1.5)

        hist = np.log1p(field.histogram)
        ax.bar(bucket_centers, hist / hist.max(), width=1.0 / len(hist), color="gray", alpha=0.4)

        ax.set_ylim(0, 1)
        ax.set_ylabel(preset.name.lower())

    axes[-1].set_xlabel("density")
    plt.tight_layout()

    output_path.parent.mkdir(parents=True, exist_ok=True)
    plt.savefig(output_path, dpi=150, bbox_inches="tight")
    print(f"Saved preset overview to {output_path}")


if __name__ == "__main__":
    plot_presets()
