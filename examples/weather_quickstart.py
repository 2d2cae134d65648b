import numpy as np
from time import perf_counter
from sklearn.model_selection import train_test_split
from id3py import ID3Classifier, UnroutableInstance

# Quinlan's "play tennis" data, with temperature and humidity as numbers
feats = ["outlook", "temperature", "humidity", "windy"]
X = np.array([
    ["sunny",    85, 85, "false"], ["sunny",    80, 90, "true"],
    ["overcast", 83, 86, "false"], ["rainy",    70, 96, "false"],
    ["rainy",    68, 80, "false"], ["rainy",    65, 70, "true"],
    ["overcast", 64, 65, "true"],  ["sunny",    72, 95, "false"],
    ["sunny",    69, 70, "false"], ["rainy",    75, 80, "false"],
    ["sunny",    75, 70, "true"],  ["overcast", 72, 90, "true"],
    ["overcast", 81, 75, "false"], ["rainy",    71, 91, "true"],
], dtype=object)
y = np.array(["no", "no", "yes", "yes", "yes", "no", "yes",
              "no", "yes", "yes", "yes", "yes", "yes", "no"])

for criterion in ("gain_ratio", "gini"):
    for binary in (False, True):
        clf = ID3Classifier(
            criterion=criterion, binary_splits=binary, min_leaf_size=1,
            feature_names=feats, categorical_features=["outlook", "windy"],
        )
        t0 = perf_counter(); clf.fit(X, y)
        print(f"\n== criterion={criterion} binary={binary} fit: {perf_counter()-t0:.4f} s")
        clf.print_tree()
        print("training accuracy:", clf.score(X, y))

X_tr, X_te, y_tr, y_te = train_test_split(X, y, test_size=0.3, random_state=0)
clf = ID3Classifier(binary_splits=True, min_leaf_size=1, feature_names=feats,
                    categorical_features=["outlook", "windy"]).fit(X_tr, y_tr)
print("\nrules:")
for r in clf.export_rules():
    print("  ", r)
try:
    print("hold-out predictions:", clf.predict(X_te))
except UnroutableInstance as e:
    print(f"Could not classify the hold-out rows: {e}")
