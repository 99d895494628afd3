"""
Pytest configuration for unit tests.

Provides generated-shard fixtures in both entry encodings.
"""
import pytest


LEGACY_NOT_SHARD = '''(function() {var implementors = {};
implementors["chrono"] = [];
implementors["openssl"] = ["impl <a class='trait' href='https://doc.rust-lang.org/nightly/core/ops/trait.Not.html' title='core::ops::Not'>Not</a> for <a class='struct' href='openssl/ssl/struct.SslMode.html' title='openssl::ssl::SslMode'>SslMode</a>","impl <a class='trait' href='https://doc.rust-lang.org/nightly/core/ops/trait.Not.html' title='core::ops::Not'>Not</a> for <a class='struct' href='openssl/ssl/struct.SslOption.html' title='openssl::ssl::SslOption'>SslOption</a>",];

            if (window.register_implementors) {
                window.register_implementors(implementors);
            } else {
                window.pending_implementors = implementors;
            }

})()
'''

OBJECT_ITER_SHARD = '''(function() {var implementors = {};
implementors["memchr"] = [{text:"impl&lt;'a&gt; <a class=\\"trait\\" href=\\"https://doc.rust-lang.org/nightly/core/iter/traits/trait.DoubleEndedIterator.html\\" title=\\"trait core::iter::traits::DoubleEndedIterator\\">DoubleEndedIterator</a> for <a class=\\"struct\\" href=\\"memchr/struct.Memchr.html\\" title=\\"struct memchr::Memchr\\">Memchr</a>&lt;'a&gt;",synthetic:false,types:["memchr::Memchr"]},];
implementors["clap"] = [{text:"impl&lt;'a&gt; <a class=\\"trait\\" href=\\"https://doc.rust-lang.org/nightly/core/iter/traits/trait.DoubleEndedIterator.html\\" title=\\"trait core::iter::traits::DoubleEndedIterator\\">DoubleEndedIterator</a> for <a class=\\"struct\\" href=\\"clap/struct.Values.html\\" title=\\"struct clap::Values\\">Values</a>&lt;'a&gt;",synthetic:false,types:["clap::args::arg_matches::Values"]},{text:"impl&lt;'a&gt; <a class=\\"trait\\" href=\\"https://doc.rust-lang.org/nightly/core/iter/traits/trait.DoubleEndedIterator.html\\" title=\\"trait core::iter::traits::DoubleEndedIterator\\">DoubleEndedIterator</a> for <a class=\\"struct\\" href=\\"clap/struct.OsValues.html\\" title=\\"struct clap::OsValues\\">OsValues</a>&lt;'a&gt;",synthetic:true,types:["clap::args::arg_matches::OsValues"]},];

            if (window.register_implementors) {
                window.register_implementors(implementors);
            } else {
                window.pending_implementors = implementors;
            }

})()
'''

SERVICE_SHARD = '''(function() {var implementors = {};
implementors["hyper_tls"] = ["impl&lt;T:&nbsp;<a class=\\"trait\\" href=\\"hyper/client/connect/trait.Connect.html\\" title=\\"trait hyper::client::connect::Connect\\">Connect</a>&gt; <a class=\\"trait\\" href=\\"tokio_service/trait.Service.html\\" title=\\"trait tokio_service::Service\\">Service</a> for <a class=\\"struct\\" href=\\"hyper_tls/struct.HttpsConnector.html\\" title=\\"struct hyper_tls::HttpsConnector\\">HttpsConnector</a>&lt;T&gt;",];
implementors["tokio_service"] = [];

            if (window.register_implementors) {
                window.register_implementors(implementors);
            } else {
                window.pending_implementors = implementors;
            }

})()
'''


@pytest.fixture
def implementors_dir(tmp_path):
    """Create a minimal generated implementors directory."""
    root = tmp_path / "implementors"
    (root / "core" / "ops").mkdir(parents=True)
    (root / "core" / "iter" / "traits").mkdir(parents=True)
    (root / "tokio_service").mkdir(parents=True)

    (root / "core" / "ops" / "trait.Not.js").write_text(LEGACY_NOT_SHARD)
    (root / "core" / "iter" / "traits" / "trait.DoubleEndedIterator.js").write_text(OBJECT_ITER_SHARD)
    (root / "tokio_service" / "trait.Service.js").write_text(SERVICE_SHARD)

    # Not a shard file
    (root / "core" / "ops" / "README.md").write_text("# notes\n")

    return root
