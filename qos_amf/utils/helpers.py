import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns
from typing import Dict, List, Optional

from ..data.samples import EPS


def evaluate(test_matrix, pred_matrix, eps: float = EPS) -> Dict[str, float]:
    """
    Evaluate predictions on the observed entries of a test matrix.

    Args:
        test_matrix : held-out QoS values, |x| <= eps meaning not held out
        pred_matrix : dense predictions on the same scale
        eps         : missing-value threshold
    Returns:
        dict: {
          "MAE": mean absolute error,
          "NMAE": MAE / mean observed value,
          "RMSE": root mean squared error,
          "MRE": median relative error,
          "NPRE": 90th percentile relative error
        }
        Every metric is nan when the test matrix holds no entries.
    """
    test = np.asarray(test_matrix, dtype=np.float64)
    pred = np.asarray(pred_matrix, dtype=np.float64)
    if test.shape != pred.shape:
        raise ValueError(f"shape mismatch: test {test.shape} vs pred {pred.shape}")

    mask = np.abs(test) > eps
    if not mask.any():
        return {name: float('nan') for name in ("MAE", "NMAE", "RMSE", "MRE", "NPRE")}

    real = test[mask]
    abs_err = np.abs(real - pred[mask])
    rel_err = abs_err / real

    mae = float(np.mean(abs_err))
    return {
        "MAE": mae,
        "NMAE": mae / float(np.mean(real)),
        "RMSE": float(np.sqrt(np.mean(np.square(abs_err)))),
        "MRE": float(np.median(rel_err)),
        "NPRE": float(np.percentile(rel_err, 90)),
    }

def plot_training_history(history: Dict[str, List[float]],
                          figsize: tuple = (8, 5),
                          save_path: Optional[str] = None,
                          show: bool = True):
    """
    Plot the normalised training loss over epochs.

    Args:
        history (dict): {'loss': [...]} as returned in FitResult.history
        figsize (tuple): Figure size (width, height)
        save_path (str): If provided, save the plot to this path
        show (bool): Whether to open the plot window
    """
    sns.set_style("whitegrid")
    fig = plt.figure(figsize=figsize)

    df = pd.DataFrame(history)
    epochs = range(1, len(df) + 1)

    plt.plot(epochs, df['loss'], 'b-', label='Training Loss', marker='o', markersize=3)
    plt.yscale('log')
    plt.title('AMF Loss Over Epochs')
    plt.xlabel('Epoch')
    plt.ylabel('Normalised loss')
    plt.legend()
    plt.tight_layout()

    if save_path:
        plt.savefig(save_path)
        print(f"Plot saved to {save_path}")

    if show:
        plt.show()
    else:
        plt.close(fig)

def create_training_summary(history: Dict[str, List[float]],
                            model_name: str,
                            metrics: Optional[Dict[str, float]] = None,
                            save_path: Optional[str] = None) -> pd.DataFrame:
    """
    Create a summary DataFrame of a fit and optionally save it.

    Args:
        history (dict): Training history dictionary
        model_name (str): Name of the model
        metrics (dict): Optional evaluation metrics to append
        save_path (str): If provided, save the summary to this path as CSV

    Returns:
        pd.DataFrame: Summary of training metrics
    """
    losses = history['loss']
    summary = {
        'Model': model_name,
        'Total Epochs': len(losses),
        'Final Loss': losses[-1] if losses else float('nan'),
        'Best Loss': min(losses) if losses else float('nan'),
        'Best Epoch': losses.index(min(losses)) + 1 if losses else 0,
    }

    for name, value in (metrics or {}).items():
        summary[name] = value

    df = pd.DataFrame([summary])

    if save_path:
        df.to_csv(save_path, index=False)
        print(f"Summary saved to {save_path}")

    return df
