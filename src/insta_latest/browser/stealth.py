"""Fingerprint-evasion shim for headless Chromium.

Installed with ``context.add_init_script`` so it runs before any page JS.
Values are parameterized to stay consistent with the Windows desktop
identity the session advertises in its User-Agent and client hints.
"""
import json
import logging

log = logging.getLogger(__name__)


def build_stealth_shim(
    *,
    platform: str = "Win32",
    languages: tuple[str, ...] = ("en-US", "en"),
    hardware_concurrency: int = 8,
    device_memory: int = 8,
    screen_width: int = 1920,
    screen_height: int = 1080,
) -> str:
    """Build a JS shim masking the common headless tells."""
    platform_js = json.dumps(platform)
    languages_js = json.dumps(list(languages))
    language_js = json.dumps(languages[0] if languages else "en-US")
    return f"""
    (() => {{
        const fix = (obj, prop, value) => Object.defineProperty(obj, prop, {{
            get: () => value, configurable: true,
        }});

        fix(navigator, 'webdriver', undefined);
        fix(navigator, 'platform', {platform_js});
        fix(navigator, 'languages', {languages_js});
        fix(navigator, 'language', {language_js});
        fix(navigator, 'hardwareConcurrency', {hardware_concurrency});
        fix(navigator, 'deviceMemory', {device_memory});
        // headless reports no plugins
        fix(navigator, 'plugins', [1, 2, 3, 4, 5]);
        fix(screen, 'width', {screen_width});
        fix(screen, 'height', {screen_height});
        fix(screen, 'availWidth', {screen_width});
        fix(screen, 'availHeight', {screen_height} - 40);

        if (!window.chrome) {{
            window.chrome = {{ runtime: {{}}, app: {{ isInstalled: false }} }};
        }}

        // headless has outer == inner; a real window adds browser chrome
        Object.defineProperty(window, 'outerWidth', {{
            get: () => window.innerWidth, configurable: true,
        }});
        Object.defineProperty(window, 'outerHeight', {{
            get: () => window.innerHeight + 85, configurable: true,
        }});

        const perms = navigator.permissions;
        if (perms && perms.query) {{
            const query = perms.query.bind(perms);
            perms.query = (desc) => (desc && desc.name === 'notifications')
                ? Promise.resolve({{ state: Notification.permission === 'default'
                    ? 'prompt' : Notification.permission }})
                : query(desc);
        }}
    }})();
    """


def install_stealth(context, **shim_kwargs) -> bool:
    """Register the shim on every page of ``context``. Returns False on failure."""
    try:
        context.add_init_script(build_stealth_shim(**shim_kwargs))
        return True
    except Exception as e:
        log.warning(f"Stealth init script failed ({e}); continuing without it")
        return False
