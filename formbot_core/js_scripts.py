"""In-page scripts used by the confirmation reader"""

TOAST_ATTRIBUTE = "data-formbot-toast"
TOAST_SELECTOR = f"[{TOAST_ATTRIBUTE}]"

# Installed as an init script so every document keeps a handle on the
# browser's own alert before the page's scripts can replace it.
PRESERVE_NATIVE_ALERT_JS = """
(() => {
  if (typeof window.alert === "function" && typeof window.__nativeAlert !== "function") {
    window.__nativeAlert = window.alert.bind(window);
  }
})();
"""

# Returns the channel used ("native-alert" | "alert") or null when no alert
# primitive exists. The call is deferred so evaluate() does not block on the
# dialog it raises.
SHOW_ALERT_JS = """
(msg) => {
  let channel = null;
  let fn = null;
  if (typeof window.__nativeAlert === "function") {
    channel = "native-alert";
    fn = window.__nativeAlert;
  } else if (typeof window.alert === "function") {
    channel = "alert";
    fn = window.alert.bind(window);
  }
  if (!fn) return null;
  setTimeout(() => fn(msg), 0);
  return channel;
}
"""

SHOW_TOAST_JS = """
(args) => {
  const toast = document.createElement("div");
  toast.setAttribute(args.marker, "");
  toast.innerText = args.message;
  Object.assign(toast.style, {
    position: "fixed",
    bottom: "20px",
    right: "20px",
    backgroundColor: "#fff",
    border: "1px solid #ccc",
    padding: "12px",
    fontFamily: "monospace",
    whiteSpace: "pre-line",
    zIndex: 9999,
  });
  document.body.appendChild(toast);
  setTimeout(() => toast.remove(), args.duration);
  return true;
}
"""
